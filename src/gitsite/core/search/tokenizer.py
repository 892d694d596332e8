"""Script-aware tokenizer shared by the index builder and the browser runtime.

Alphabetic scripts (Latin, Greek, Cyrillic, digits) are merged into words;
scripts that are not reliably space-delimited (Thai, Hiragana, CJK, Hangul)
yield one token per character. Anything else separates tokens.

TOKENIZER_JS must stay equivalent to tokenize(): the exported index embeds
it so that queries typed in the browser are tokenized like the documents.
"""

# Unicode character ranges, see https://jrgraphix.net/r/Unicode/
ALPHABETS: tuple[tuple[int, int], ...] = (
    (0x30, 0x39),  # 0-9
    (0x41, 0x5A),  # A-Z
    (0x61, 0x7A),  # a-z
    (0xC0, 0x2AF),  # part of Latin-1 supplement / Latin extended A/B / IPA
    (0x370, 0x52F),  # Greek / Cyrillic / Cyrillic supplement
)

SINGLE_CHARS: tuple[tuple[int, int], ...] = (
    (0xE00, 0xE5B),  # Thai
    (0x3040, 0x309F),  # Hiragana
    (0x4E00, 0x9FFF),  # CJK
    (0xAC00, 0xD7AF),  # Hangul syllables
)


def _in_ranges(code: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(lo <= code <= hi for lo, hi in ranges)


def is_alphabet(ch: str) -> bool:
    return _in_ranges(ord(ch), ALPHABETS)


def is_single_char(ch: str) -> bool:
    return _in_ranges(ord(ch), SINGLE_CHARS)


def tokenize(text: str) -> list[str]:
    """Split text into lower-cased search tokens.

    Alphabetic runs shorter than two characters are dropped.
    """
    tokens: list[str] = []
    run: list[str] = []

    def flush() -> None:
        if len(run) > 1:
            tokens.append("".join(run).lower())
        run.clear()

    for ch in text:
        if is_single_char(ch):
            flush()
            tokens.append(ch.lower())
        elif is_alphabet(ch):
            run.append(ch)
        else:
            flush()
    flush()
    return tokens


TOKENIZER_JS = """\
function tokenizer(str) {
    const ALPHABETS = [
        [0x30, 0x39], [0x41, 0x5a], [0x61, 0x7a], [0xc0, 0x2af], [0x370, 0x52f]
    ];
    const SINGLE_CHARS = [
        [0xe00, 0xe5b], [0x3040, 0x309f], [0x4e00, 0x9fff], [0xac00, 0xd7af]
    ];
    const inRanges = (n, ranges) => ranges.some(r => n >= r[0] && n <= r[1]);
    const tokens = [];
    let run = [];
    const flush = () => {
        if (run.length > 1) {
            tokens.push(run.join('').toLowerCase());
        }
        run = [];
    };
    for (const ch of str) {
        const code = ch.codePointAt(0);
        if (inRanges(code, SINGLE_CHARS)) {
            flush();
            tokens.push(ch.toLowerCase());
        } else if (inRanges(code, ALPHABETS)) {
            run.push(ch);
        } else {
            flush();
        }
    }
    flush();
    return tokens;
}"""
