"""Prompt templates for LLM interactions."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from app.core.prompt_sanitizer import RECORDS_PLACEHOLDER, THEME_PLACEHOLDER
from app.db.models.prompt_template import DraftMode


class RecordLike(Protocol):
    title: str
    learning: str
    action: str


SYSTEM_PROMPT = (
    "あなたは読書記録の整理と行動計画の作成を支援するAIアシスタントです。"
    "harmony response formatを使用し、chain-of-thought reasoningで深い分析を行います。"
    "推論レベル: {level}"
)


def get_system_prompt(reasoning_effort: str) -> str:
    return SYSTEM_PROMPT.format(level=reasoning_effort)


DEFAULT_TEMPLATES: Mapping[DraftMode, str] = {
    DraftMode.FACT: (
        f"以下は「{THEME_PLACEHOLDER}」というテーマで蓄積した読書記録です。"
        "これらの記録から客観的なファクトを抽出し、整理してください。\n\n"
        f"{RECORDS_PLACEHOLDER}\n\n"
        "# 指示\n"
        "- 客観的事実のみを抽出\n"
        "- データや統計、専門家の見解を重視\n"
        "- 個人的な感想や主観は除外\n"
        "- 論理的で体系的な構成\n"
        "- 引用元を明確に"
    ),
    DraftMode.ESSAY: (
        f"以下は「{THEME_PLACEHOLDER}」というテーマで蓄積した読書記録です。"
        "これらの記録から個人的な意見や洞察を抽出し、エッセイ形式で整理してください。\n\n"
        f"{RECORDS_PLACEHOLDER}\n\n"
        "# 指示\n"
        "- 個人的な体験や感想を重視\n"
        "- 主観的な洞察や気づきを表現\n"
        "- ストーリー性のある構成\n"
        "- 読者の共感を呼ぶ内容\n"
        "- 具体的なエピソードを交える"
    ),
}


def build_records_text(records: Iterable[RecordLike]) -> str:
    """Render records as a numbered list the model can cite."""
    blocks = [
        f"## {index}. {record.title}\n- 学び: {record.learning}\n- アクション: {record.action}"
        for index, record in enumerate(records, start=1)
    ]
    return "\n\n".join(blocks)


def render_draft_prompt(template: str, theme_name: str, records: Iterable[RecordLike]) -> str:
    # Plain replacement: user templates may contain other braces.
    return template.replace(THEME_PLACEHOLDER, theme_name).replace(
        RECORDS_PLACEHOLDER, build_records_text(records)
    )


def get_learning_prompt(title: str, learning: str) -> str:
    return f"""あなたは読書記録の整理を専門とするAIアシスタントです。以下の読書記録から、今日の学びを体系的に整理してください。

【読んだ本】
{title}

【今日の学び】
{learning}

【タスク】
以下の観点から学びを分析し、1000文字以内で構造化して整理してください：
1. 実践的な価値の分析
2. 長期的な成長への寄与
3. 他領域への応用可能性

【出力形式】
以下のマークダウン形式で出力してください：

【{title}からの学びと気づき】

<思考過程>
（あなたの分析プロセスをここに記載）
</思考過程>

（整理された学びの内容）"""


def get_action_prompt(title: str, learning: str, action: str) -> str:
    return f"""あなたは行動計画の最適化を専門とするAIアシスタントです。以下の情報から、実行可能な行動計画を設計してください。

【読んだ本】
{title}

【今日の学び】
{learning}

【現在のアクション】
{action}

【タスク】
現在のアクションを分析し、より具体的で実行可能なステップに最適化してください。
SMART原則（Specific, Measurable, Achievable, Relevant, Time-bound）を適用し、継続可能性を考慮してください。

【出力形式】
以下のマークダウン形式で出力してください：

【具体的な実行プラン】

<分析プロセス>
（現在のアクションの分析と改善点の特定）
</分析プロセス>

（最適化されたアクションプラン）"""
