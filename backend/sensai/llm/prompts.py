# Prompt templates

# ============================================================
# 行业洞察刷新：要求模型只返回固定结构的 JSON
# ============================================================

INDUSTRY_INSIGHT_PROMPT = """
Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON format without any additional notes or explanations:
{{
  "salaryRanges": [
    {{ "role": "string", "min": number, "max": number, "median": number, "location": "string" }}
  ],
  "growthRate": number,
  "demandLevel": "High" | "Medium" | "Low",
  "topSkills": ["skill1", "skill2"],
  "marketOutlook": "Positive" | "Neutral" | "Negative",
  "keyTrends": ["trend1", "trend2"],
  "recommendedSkills": ["skill1", "skill2"]
}}

IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting.
Include at least 5 common roles for salary ranges.
Growth rate should be a percentage.
Include at least 5 skills and trends.
"""


# ============================================================
# 简历内容改写
# ============================================================

IMPROVE_RESUME_PROMPT = """
As an expert resume writer, improve the following {section_type} description for a {industry} professional.
Make it more impactful, quantifiable, and aligned with industry standards.
Current content: "{current}"

Requirements:
1. Use action verbs
2. Include metrics and results where possible
3. Highlight relevant technical skills
4. Keep it concise but detailed
5. Focus on achievements over responsibilities
6. Use industry-specific keywords

Format the response as a single paragraph without any additional text or explanations.
"""


# ============================================================
# 模拟测验：根据答错的题目生成改进建议
# ============================================================

IMPROVEMENT_TIP_PROMPT = """
The user got the following {industry} technical interview questions wrong:

{wrong_answers}

Based on these mistakes, provide a concise, specific improvement tip.
Focus on the knowledge gaps revealed by these wrong answers.
Keep the response under 2 sentences and make it encouraging.
Don't explicitly mention the mistakes, instead focus on what to learn/practice.
"""

WRONG_ANSWER_TEMPLATE = 'Question: "{question}"\nCorrect Answer: "{answer}"\nUser Answer: "{user_answer}"'


def build_insight_prompt(industry: str) -> str:
    return INDUSTRY_INSIGHT_PROMPT.format(industry=industry)


def build_improve_prompt(section_type: str, industry: str, current: str) -> str:
    return IMPROVE_RESUME_PROMPT.format(
        section_type=section_type,
        industry=industry,
        current=current
    )


def build_improvement_tip_prompt(industry: str, wrong_answers: list) -> str:
    blocks = [
        WRONG_ANSWER_TEMPLATE.format(
            question=item["question"],
            answer=item["answer"],
            user_answer=item["user_answer"]
        )
        for item in wrong_answers
    ]
    return IMPROVEMENT_TIP_PROMPT.format(
        industry=industry or "general",
        wrong_answers="\n\n".join(blocks)
    )
