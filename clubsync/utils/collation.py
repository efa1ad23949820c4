"""일본어 표시명 정렬 키"""
import unicodedata

# 가타카나(ァ-ヶ) → 히라가나 오프셋
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60

# 탁점 / 반탁점 (결합 문자)
_VOICED_MARKS = {"\u3099", "\u309a"}

# 작은 가나 → 보통 크기
_SMALL_KANA = str.maketrans("ぁぃぅぇぉっゃゅょゎゕゖ", "あいうえおつやゆよわかけ")


def _fold_katakana(text: str) -> str:
    return "".join(
        chr(ord(ch) - _KANA_OFFSET) if _KATAKANA_START <= ord(ch) <= _KATAKANA_END else ch
        for ch in text
    )


def _base_kana(text: str) -> str:
    """탁점 제거 + 작은 가나 확대 (が → か, ぱ → は, ゃ → や)"""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if ch not in _VOICED_MARKS)
    return unicodedata.normalize("NFC", stripped).translate(_SMALL_KANA)


def ja_sort_key(name: str) -> tuple:
    """
    원장 언어(일본어) 기준 정렬 키

    1차: 청음/보통 크기 가나로 접은 값 (か = が = ガ, つ = っ)
    2차: 탁점과 작은 가나를 구분한 값 (か < が)
    3차: 원문

    NFKC 정규화 → 대소문자 무시 → 가타카나를 히라가나로 접어서
    숫자 < 라틴 < 가나(50음순) < 한자 순서가 되도록 한다.
    """
    folded = _fold_katakana(unicodedata.normalize("NFKC", name or "").casefold())
    return (_base_kana(folded), folded, name or "")
