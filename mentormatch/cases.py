"""
Case document generation.

Builds the narrative prompt for a chosen mentor and the job-seeker's
situation, asks the text-generation client for the document and wraps
the result in a case record ready for the archive.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .archive import new_case_id
from .errors import CaseGenerationError, InvalidRequest, LLMError
from .logger import get_logger
from .models import Mentor
from .qwen import QwenClient
from .retry import RetryError, exponential_backoff, is_transient_error

logger = get_logger()

LANGUAGE_STYLES = {
    "professional": "专业严谨",
    "warm": "亲和温婉",
    "inspiring": "热血励志",
    "direct": "干货直击",
}
DEFAULT_LANGUAGE_STYLE = "professional"

PROBLEM_LABELS = {
    "interview": "面试碰壁",
    "exam": "笔试碰壁",
    "resume": "简历投递无反馈",
    "career": "职业规划不明确",
}

PROBLEM_DESCRIPTIONS = {
    "interview": "面试碰壁，多次在面试环节被淘汰",
    "exam": "笔试碰壁，技术测试或笔试环节表现不佳",
    "resume": "简历投递无反馈，投递了大量简历但石沉大海",
    "career": "职业规划不明确，不知道自己的优势和适合的方向",
}

UNSPECIFIED = "未指定"


def describe_problems(problems: Optional[Sequence[str]]) -> str:
    """Long-form description of the customer's problems, unknown codes verbatim."""
    if not problems:
        return UNSPECIFIED
    return "、".join(PROBLEM_DESCRIPTIONS.get(p, p) for p in problems)


def _mentor_lines(mentor: Mentor) -> List[str]:
    lines = [f"- 姓名：{mentor.name}"]
    for label, value in (
        ("公司", mentor.company),
        ("职位", mentor.position),
        ("擅长方向", mentor.direction),
        ("教育背景", mentor.education),
        ("详细介绍", mentor.information),
    ):
        if value:
            lines.append(f"- {label}：{value}")
    return lines


def build_case_prompt(
    mentor: Mentor,
    direction: str = "",
    role: str = "",
    customer_problems: Optional[Sequence[str]] = None,
    highlights: str = "",
    language_style: str = DEFAULT_LANGUAGE_STYLE,
) -> str:
    style = LANGUAGE_STYLES.get(language_style, LANGUAGE_STYLES[DEFAULT_LANGUAGE_STYLE])
    problems = describe_problems(customer_problems)
    direction_text = direction or UNSPECIFIED
    field = direction or "该领域"

    customer = [f"- 求职方向：{direction_text}"]
    if role:
        customer.append(f"- 求职岗位：{role}")
    customer.append(f"- 客户遇到的问题：{problems}")
    if highlights:
        customer.append(f"- 需要突出的内容：{highlights}")

    emphasis = f"\n5. 特别强调：{highlights}" if highlights else ""

    mentor_block = "\n".join(_mentor_lines(mentor))
    customer_block = "\n".join(customer)

    return f"""请根据以下信息生成一份留学生求职案例报告，用于促单展示。

导师信息：
{mentor_block}

客户求职信息：
{customer_block}

请生成一份案例报告，严格分为两部分：

【第一部分：背景介绍】
请快速介绍：
1. 导师背景（简要介绍导师的核心优势，突出其在{field}的专业能力和成功经验）
2. 学员背景（杜撰一个海归留学生案例，要求：
   - 学生是海归留学生（可以来自美国、英国、澳洲、加拿大等国家）
   - 在国内求职
   - 求职方向与输入的"{direction_text}"类似，但不要完全一致（可以略有差异，比如输入"互联网"可以写成"互联网产品"或"互联网运营"等）
   - 如果提供了岗位"{role}"，学员的岗位可以类似但不完全一致
   - 简要介绍学员的学历背景、专业、留学经历等）

【第二部分：成功故事】
请写一个约500字的详细故事，要求：
1. **辅导前的情况**（约150字）：
   - 详细描述学员在求职过程中遇到的困难和挫折
   - 重点描述学员遇到的问题：{problems}
   - 描述学员的焦虑、迷茫、挫败感等情绪状态
   - 可以具体描述几次失败的面试经历或简历投递无果的情况

2. **辅导过程和转折点**（约200字）：
   - 详细描述导师如何介入并提供帮助
   - 描述具体的辅导内容（简历优化、面试技巧指导、职业规划建议、内推资源、模拟面试等）
   - 可以描述1-2个关键的转折点或突破时刻

3. **辅导后的成果和对比**（约150字）：
   - 对比辅导前后的状态（从迷茫到清晰、从失败到成功、从焦虑到自信等）
   - 最终成功上岸知名企业
   - 强调导师辅导的关键作用和价值

4. **整体要求**：
   - 故事要有强烈的对比感
   - 内容要贴近现实，真实可信{emphasis}

要求：
- 语言风格：{style}，但要有感染力
- 内容真实可信，逻辑清晰
- 突出导师的专业价值和辅导效果

请直接输出两部分内容，不需要额外的标题或格式说明。"""


def generate_case(
    client: QwenClient,
    mentor: Optional[Mentor],
    direction: str = "",
    role: str = "",
    customer_problems: Optional[Sequence[str]] = None,
    highlights: str = "",
    core_content: str = "",
    temperature: float = 0.7,
    max_tokens: int = 2000,
    max_retries: int = 2,
) -> Dict[str, Any]:
    """
    Generate a case document for `mentor`.

    Returns:
        Case record dict (id, timestamp, mentor, ..., case)

    Raises:
        InvalidRequest: no mentor given
        CaseGenerationError: the client failed, after retrying transient errors
    """
    if mentor is None:
        raise InvalidRequest("请提供老师信息")

    problems = list(customer_problems or [])
    prompt = build_case_prompt(mentor, direction, role, problems, highlights)

    def _log_retry(attempt: int, exc: Exception, delay: float):
        logger.warning("Retrying case generation", attempt=attempt, delay=delay, error=str(exc))

    @exponential_backoff(
        max_retries=max_retries,
        base_delay=1.0,
        max_delay=8.0,
        exceptions=(LLMError,),
        should_retry=is_transient_error,
        on_retry=_log_retry,
    )
    def _generate() -> str:
        return client.generate(prompt, temperature=temperature, max_tokens=max_tokens)

    try:
        text = _generate()
    except (LLMError, RetryError) as e:
        logger.error("Case generation failed", mentor=mentor.name, error=str(e))
        raise CaseGenerationError(f"通义千问 API 调用失败: {e}") from e

    logger.info("Case generated", mentor=mentor.name, chars=len(text))
    return {
        "id": new_case_id(),
        "timestamp": datetime.now().isoformat(),
        "mentor": mentor.to_dict(),
        "direction": direction or "",
        "role": role or "",
        "customer_problems": problems,
        "core_content": core_content or "",
        "highlights": highlights or "",
        "language_style": DEFAULT_LANGUAGE_STYLE,
        "case": text,
    }
