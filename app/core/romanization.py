"""Romaji slugs for Japanese tag names.

Tag pages are addressed by URL-friendly slugs. Kana are transliterated with
Hepburn-style tables, a small dictionary covers kanji words common in book
tags, and anything else is dropped in favour of a short hash suffix so that
two different names never collapse onto the same slug.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable, Mapping

_HIRAGANA: dict[str, str] = {
    "あ": "a", "い": "i", "う": "u", "え": "e", "お": "o",
    "か": "ka", "き": "ki", "く": "ku", "け": "ke", "こ": "ko",
    "が": "ga", "ぎ": "gi", "ぐ": "gu", "げ": "ge", "ご": "go",
    "さ": "sa", "し": "shi", "す": "su", "せ": "se", "そ": "so",
    "ざ": "za", "じ": "ji", "ず": "zu", "ぜ": "ze", "ぞ": "zo",
    "た": "ta", "ち": "chi", "つ": "tsu", "て": "te", "と": "to",
    "だ": "da", "ぢ": "ji", "づ": "zu", "で": "de", "ど": "do",
    "な": "na", "に": "ni", "ぬ": "nu", "ね": "ne", "の": "no",
    "は": "ha", "ひ": "hi", "ふ": "fu", "へ": "he", "ほ": "ho",
    "ば": "ba", "び": "bi", "ぶ": "bu", "べ": "be", "ぼ": "bo",
    "ぱ": "pa", "ぴ": "pi", "ぷ": "pu", "ぺ": "pe", "ぽ": "po",
    "ま": "ma", "み": "mi", "む": "mu", "め": "me", "も": "mo",
    "や": "ya", "ゆ": "yu", "よ": "yo",
    "ら": "ra", "り": "ri", "る": "ru", "れ": "re", "ろ": "ro",
    "わ": "wa", "ゐ": "wi", "ゑ": "we", "を": "wo", "ん": "n",
    "ゔ": "vu",
    "ぁ": "a", "ぃ": "i", "ぅ": "u", "ぇ": "e", "ぉ": "o",
    "ゃ": "ya", "ゅ": "yu", "ょ": "yo",
    # youon
    "きゃ": "kya", "きゅ": "kyu", "きょ": "kyo",
    "しゃ": "sha", "しゅ": "shu", "しょ": "sho",
    "ちゃ": "cha", "ちゅ": "chu", "ちょ": "cho",
    "にゃ": "nya", "にゅ": "nyu", "にょ": "nyo",
    "ひゃ": "hya", "ひゅ": "hyu", "ひょ": "hyo",
    "みゃ": "mya", "みゅ": "myu", "みょ": "myo",
    "りゃ": "rya", "りゅ": "ryu", "りょ": "ryo",
    "ぎゃ": "gya", "ぎゅ": "gyu", "ぎょ": "gyo",
    "じゃ": "ja", "じゅ": "ju", "じょ": "jo",
    "びゃ": "bya", "びゅ": "byu", "びょ": "byo",
    "ぴゃ": "pya", "ぴゅ": "pyu", "ぴょ": "pyo",
    # loanword combinations, mostly written in katakana
    "てぃ": "ti", "でぃ": "di", "ふぁ": "fa", "ふぃ": "fi", "ふぇ": "fe", "ふぉ": "fo",
    "うぃ": "wi", "うぇ": "we", "うぉ": "wo", "しぇ": "she", "じぇ": "je", "ちぇ": "che",
}

# Katakana sit exactly 0x60 code points above their hiragana counterparts.
_KATAKANA: dict[str, str] = {
    "".join(chr(ord(char) + 0x60) for char in kana): romaji for kana, romaji in _HIRAGANA.items()
}

_KANA: dict[str, str] = {**_HIRAGANA, **_KATAKANA}

# Kanji words that show up in book tags; longest match wins.
_KANJI_WORDS: dict[str, str] = {
    "自己啓発": "jikokeihatsu",
    "読書": "dokusho",
    "小説": "shousetsu",
    "経済": "keizai",
    "経営": "keiei",
    "歴史": "rekishi",
    "哲学": "tetsugaku",
    "心理学": "shinrigaku",
    "心理": "shinri",
    "科学": "kagaku",
    "技術": "gijutsu",
    "文学": "bungaku",
    "漫画": "manga",
    "教育": "kyouiku",
    "健康": "kenkou",
    "投資": "toushi",
    "習慣": "shuukan",
    "仕事": "shigoto",
    "思考": "shikou",
    "入門": "nyuumon",
    "英語": "eigo",
    "数学": "suugaku",
    "社会": "shakai",
    "政治": "seiji",
    "料理": "ryouri",
    "育児": "ikuji",
    "人生": "jinsei",
    "本": "hon",
}

_SOKUON = ("っ", "ッ")
_CHOUON = "ー"
_SPACES = (" ", "　")
_ASCII_ALNUM = re.compile(r"[A-Za-z0-9]")
_FULLWIDTH_ALNUM = re.compile(r"[Ａ-Ｚａ-ｚ０-９]")
_HYPHENS = re.compile(r"-+")
_TABLES: tuple[Mapping[str, str], ...] = (_KANJI_WORDS, _KANA)
_LONGEST_KEY = max(len(key) for table in _TABLES for key in table)


def _short_hash(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:8]


def _lookup(text: str, start: int) -> tuple[str, int] | None:
    """Longest table match at ``start``: (romaji, characters consumed)."""
    for length in range(min(_LONGEST_KEY, len(text) - start), 0, -1):
        chunk = text[start : start + length]
        for table in _TABLES:
            if chunk in table:
                return table[chunk], length
    return None


def romanize_tag_name(tag_name: str) -> str:
    """Turn a Japanese tag name into a lowercase ASCII slug.

    >>> romanize_tag_name("ビジネス 入門")
    'bijinesu-nyuumon'
    """
    parts: list[str] = []
    lossy = False
    i = 0
    while i < len(tag_name):
        char = tag_name[i]

        if char in _SOKUON:
            following = _lookup(tag_name, i + 1)
            if following and following[0][0] not in "aeiou-":
                # Gemination doubles the next consonant ("っか" -> "kka", "っち" -> "tchi").
                parts.append("t" if following[0].startswith("ch") else following[0][0])
            else:
                parts.append("tsu")
            i += 1
            continue

        match = _lookup(tag_name, i)
        if match is not None:
            romaji, consumed = match
            parts.append(romaji)
            i += consumed
            continue

        if char == _CHOUON or char in _SPACES or char in "-_":
            parts.append("-")
        elif _ASCII_ALNUM.match(char):
            parts.append(char.lower())
        elif _FULLWIDTH_ALNUM.match(char):
            parts.append(chr(ord(char) - 0xFEE0).lower())
        else:
            lossy = True
        i += 1

    slug = _HYPHENS.sub("-", "".join(parts)).strip("-")
    if not slug:
        return f"tag-{_short_hash(tag_name)}"
    if lossy:
        return f"{slug}-{_short_hash(tag_name)}"
    return slug


def find_original_tag_name(romanized_tag: str, tag_names: Iterable[str]) -> str | None:
    """Reverse lookup: the first tag name whose slug equals ``romanized_tag``."""
    for name in tag_names:
        if romanize_tag_name(name) == romanized_tag:
            return name
    return None
