"""测试日志配置"""

from sensai.logger import logger, setup_logger


class TestSetupLogger:
    """测试 setup_logger"""

    def test_console_only(self, monkeypatch):
        """测试没有日志目录时只输出到控制台"""
        monkeypatch.delenv("SENSAI_LOG_DIR", raising=False)
        assert setup_logger() is None

    def test_file_sink(self, tmp_path):
        """测试写入文件日志"""
        log_file = setup_logger(log_dir=tmp_path / "logs")

        logger.debug("[Test] 文件日志可写")
        logger.complete()

        assert log_file == tmp_path / "logs" / "sensai.log"
        assert "[Test] 文件日志可写" in log_file.read_text(encoding="utf-8")

        # 恢复为仅控制台输出，释放文件句柄
        setup_logger()

    def test_log_dir_from_env(self, tmp_path, monkeypatch):
        """测试通过 SENSAI_LOG_DIR 指定日志目录"""
        monkeypatch.setenv("SENSAI_LOG_DIR", str(tmp_path))

        assert setup_logger() == tmp_path / "sensai.log"

        monkeypatch.delenv("SENSAI_LOG_DIR")
        setup_logger()
