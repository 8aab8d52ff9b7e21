"""
行业洞察刷新任务

由外部调度器每周触发一次（cron: 0 0 * * 0）。对洞察表里的每个行业：
1. 生成固定模板提示词
2. 调用 LLM
3. 去掉代码块包裹，解析并严格校验 JSON
4. 在独立事务里覆盖该行业的洞察，并刷新 last_updated / next_update

每个行业互相独立：某个行业失败只记录日志并跳过，原有数据保持不变，
其余行业继续处理。

命令行入口：
    python -m sensai.jobs.insight_refresh
"""

import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from sensai.db.init_db import get_engine
from sensai.exceptions import NotFound
from sensai.llm.parsing import message_text, parse_insight_payload
from sensai.llm.prompts import build_insight_prompt
from sensai.logger import logger
from sensai.repositories.industry_insight_repository import IndustryInsightRepository


@dataclass
class RefreshOutcome:
    """单个行业的刷新结果"""
    industry: str
    success: bool
    error: Optional[str] = None


class InsightRefreshJob:
    """
    行业洞察刷新任务

    使用示例：
        job = InsightRefreshJob(llm=get_llm())
        outcomes = job.run()
        failed = [o for o in outcomes.values() if not o.success]
    """

    def __init__(self, llm: Any, engine: Optional[Engine] = None, max_workers: int = 1):
        """
        Args:
            llm: LangChain 聊天模型（进程启动时创建一次）
            engine: 数据库引擎
            max_workers: 并发处理的行业数，默认 1 即顺序执行
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.llm = llm
        self.engine = engine or get_engine()
        self.max_workers = max_workers

    def list_industries(self) -> List[str]:
        with Session(self.engine) as session:
            return IndustryInsightRepository(session).list_industries()

    def run(self) -> Dict[str, RefreshOutcome]:
        """
        刷新所有行业

        Returns:
            {行业标签: RefreshOutcome}
        """
        industries = self.list_industries()
        logger.info(f"[InsightRefreshJob] 开始刷新 {len(industries)} 个行业")

        if self.max_workers == 1 or len(industries) <= 1:
            outcomes = [self.refresh_industry(industry) for industry in industries]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(self.refresh_industry, industries))

        succeeded = sum(1 for o in outcomes if o.success)
        logger.info(
            f"[InsightRefreshJob] 刷新完成: 成功 {succeeded}, 失败 {len(outcomes) - succeeded}"
        )
        return {o.industry: o for o in outcomes}

    def refresh_industry(self, industry: str) -> RefreshOutcome:
        """
        刷新单个行业，任何异常都被记录为失败结果，不向外抛出
        """
        try:
            raw_text = self._generate(industry)
            payload = parse_insight_payload(raw_text)

            with Session(self.engine) as session:
                with session.begin():
                    repo = IndustryInsightRepository(session)
                    insight = repo.get_by_industry(industry)
                    if insight is None:
                        raise NotFound(f"Industry '{industry}' no longer exists")
                    repo.apply_refresh(insight, payload.to_store_fields())
        except Exception as e:
            logger.error(f"[InsightRefreshJob] 行业 '{industry}' 刷新失败: {e}")
            return RefreshOutcome(industry=industry, success=False, error=str(e))

        logger.info(f"[InsightRefreshJob] 行业 '{industry}' 已刷新")
        return RefreshOutcome(industry=industry, success=True)

    def _generate(self, industry: str) -> str:
        response = self.llm.invoke(build_insight_prompt(industry))
        return message_text(response)


def main() -> int:
    """调度器入口：全部成功返回 0，有失败返回 1"""
    from sensai.llm.llm_factory import get_llm
    from sensai.logger import setup_logger

    setup_logger()
    job = InsightRefreshJob(llm=get_llm())
    outcomes = job.run()
    return 0 if all(o.success for o in outcomes.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
