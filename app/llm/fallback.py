"""Templated text returned when no LLM endpoint is configured or a call fails."""

from __future__ import annotations

from collections.abc import Sequence

from app.db.models.prompt_template import DraftMode
from app.llm.prompts import RecordLike


def learning_insights(title: str, learning: str) -> str:
    return f"""【{title}からの学びと気づき】

{learning}から得られた核心的なポイントを整理すると、以下の3つの重要な洞察が浮かび上がります：

1. **実践的な価値**: この学びは日常生活や仕事において、具体的な改善をもたらす実用性の高い知識です。

2. **継続的な成長**: 一時的な理解ではなく、長期的な成長と発展に寄与する基盤となる洞察です。

3. **応用可能性**: この学びは複数の場面や状況に応用でき、柔軟な思考力を育む要素を含んでいます。

これらの気づきを通じて、あなたの認識や行動パターンに新たな視点が加わり、より効果的な判断や行動につながることが期待できます。"""


def action_plan(action: str) -> str:
    return f"""【具体的な実行プラン】

現在設定されているアクション「{action}」を、より実行可能で測定可能なステップに分解します：

**今日から始める小さなステップ:**
• 明日の朝、まず5分間この学びについて振り返る時間を作る
• {action}を実行するための具体的な準備を今日中に整える
• 実行した結果を記録するための簡単なメモ環境を用意する

**継続のための工夫:**
• 週末に今週の実行状況を振り返る時間を15分間設ける
• うまくいかなかった場合の代替案を事前に2つ準備しておく
• 成功した時の自分への小さなご褒美を設定する

**成功の指標:**
• 1週間継続できた場合は「習慣化の第一段階クリア」
• 2週間継続できた場合は「定着化成功」として次のレベルに進む

このプランにより、学びを実際の行動変化につなげ、持続可能な成長サイクルを構築できます。"""


_DRAFT_HEADINGS: dict[DraftMode, tuple[str, str]] = {
    DraftMode.FACT: ("ファクトまとめ", "記録から読み取れる事実"),
    DraftMode.ESSAY: ("エッセイ", "読書を通じて考えたこと"),
}


def theme_draft(theme_name: str, mode: DraftMode, records: Sequence[RecordLike]) -> str:
    """Outline built straight from the records, one section per book."""
    heading, lead = _DRAFT_HEADINGS[mode]
    lines = [f"# {theme_name}：{heading}", "", f"{lead}を{len(records)}件の読書記録から整理しました。"]
    for record in records:
        lines.extend(
            [
                "",
                f"## {record.title}",
                f"- 学び: {record.learning}",
                f"- アクション: {record.action}",
            ]
        )
    lines.extend(["", f"「{theme_name}」の読書はこれからも続きます。"])
    return "\n".join(lines)
