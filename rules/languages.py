# ISO 639-2 代码 -> 常见别名（全称、ISO 639-1、旧式 B 代码）
LANGUAGE_ALIASES: dict[str, tuple[str, ...]] = {
    "eng": ("english", "en"),
    "jpn": ("japanese", "ja", "jp"),
    "kor": ("korean", "ko", "kr"),
    "deu": ("german", "de", "ger"),
    "fra": ("french", "fr", "fre"),
    "spa": ("spanish", "es"),
    "ita": ("italian", "it"),
    "por": ("portuguese", "pt"),
    "rus": ("russian", "ru"),
    "zho": ("chinese", "zh", "chi", "cmn", "mandarin"),
    "ara": ("arabic", "ar"),
    "hin": ("hindi", "hi"),
    "tha": ("thai", "th"),
    "vie": ("vietnamese", "vi"),
    "pol": ("polish", "pl"),
    "nld": ("dutch", "nl", "dut"),
    "swe": ("swedish", "sv"),
    "nor": ("norwegian", "no", "nob", "nno"),
    "dan": ("danish", "da"),
    "fin": ("finnish", "fi"),
    "tur": ("turkish", "tr"),
    "ind": ("indonesian", "id"),
    "ukr": ("ukrainian", "uk"),
    "ces": ("czech", "cs", "cze"),
    "hun": ("hungarian", "hu"),
    "ron": ("romanian", "ro", "rum"),
    "ell": ("greek", "el", "gre"),
    "heb": ("hebrew", "he"),
    "lat": ("latin", "la"),
    "und": ("undetermined", "unknown"),
}

_ALIAS_TO_CODE = {
    alias: code
    for code, aliases in LANGUAGE_ALIASES.items()
    for alias in aliases
}


def normalize_language(language: str) -> str:
    """把语言名称或代码统一为 ISO 639-2 代码。

    接受全称（"English"）、两位或三位代码（"en" / "eng"）；
    无法识别的语言原样（小写）返回，用于直接比较。
    """
    lower = language.lower().strip()
    if lower in LANGUAGE_ALIASES:
        return lower
    return _ALIAS_TO_CODE.get(lower, lower)


def language_matches(stream_language: str, target_language: str) -> bool:
    return normalize_language(stream_language) == normalize_language(target_language)
