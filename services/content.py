from __future__ import annotations
from dataclasses import dataclass
import json
import logging
from pathlib import Path
import random
import re
from typing import Dict, List, Optional, Tuple

from app.errors import ContentError
from app.validation import normalize_text, sanitize_title

log = logging.getLogger(__name__)

FALLBACK_TEXT = "The quick brown fox jumps over the lazy dog."
TIMED_MIN_LENGTH = 500

# -------- built-in library --------
LIBRARY: Dict[str, List[str]] = {
    "quotes": [
        "The only way to do great work is to love what you do. If you haven't found it yet, keep looking. Don't settle.",
        "Innovation distinguishes between a leader and a follower. Think different and make a dent in the universe.",
        "Success is not final, failure is not fatal: it is the courage to continue that counts.",
        "The way to get started is to quit talking and begin doing.",
        "Don't be afraid to give up the good to go for the great.",
        "The best time to plant a tree was 20 years ago. The second best time is now.",
        "Great things never come from comfort zones.",
        "It does not matter how slowly you go as long as you do not stop.",
        "Believe you can and you're halfway there.",
        "A person who never made a mistake never tried anything new.",
    ],
    "programming": [
        "function fibonacci(n) { if (n <= 1) return n; return fibonacci(n - 1) + fibonacci(n - 2); }",
        "const debounce = (func, delay) => { let id; return (...args) => { clearTimeout(id); id = setTimeout(() => func(...args), delay); }; };",
        "class BinarySearchTree { constructor() { this.root = null; } insert(value) { this.root = this.insertNode(this.root, value); } }",
        "def quicksort(xs): return xs if len(xs) <= 1 else quicksort([x for x in xs[1:] if x <= xs[0]]) + [xs[0]] + quicksort([x for x in xs[1:] if x > xs[0]])",
    ],
    "articles": [
        "Artificial intelligence is transforming the way we work, live, and interact with technology. Machine learning models now process vast amounts of data and find patterns people would miss.",
        "The rise of remote work has changed the modern workplace. Companies are discovering that distributed teams can be just as productive as teams that share an office.",
        "Cybersecurity has evolved from a technical concern into a business priority. Organizations must now consider security at every level of their operations.",
    ],
    "literature": [
        "It was the best of times, it was the worst of times, it was the age of wisdom, it was the age of foolishness.",
        "To be or not to be, that is the question: whether 'tis nobler in the mind to suffer the slings and arrows of outrageous fortune.",
        "Call me Ishmael. Some years ago, never mind how long precisely, having little or no money in my purse, I thought I would sail about a little.",
    ],
    "numbers": [
        "1234567890 9876543210 1357924680 2468013579 5555555555 1111111111 9999999999 1234554321",
        "3.14159265359 2.71828182846 1.41421356237 1.61803398875 0.57721566490 2.30258509299",
        "100 200 300 400 500 600 700 800 900 1000 1100 1200 1300 1400 1500 1600 1700 1800 1900 2000",
    ],
    "symbols": [
        "!@#$%^&*()_+-=[]{}|;':\",./<>? ~`!@#$%^&*()_+-=[]{}|;':\",./<>? ~`",
        "The quick brown fox jumps over the lazy dog! How vexingly quick daft zebras jump? Pack my box with five dozen liquor jugs.",
        "Email: user@example.com | Website: https://www.example.com | Phone: +1 (555) 123-4567",
    ],
}

COMMON_WORDS = (
    "the be to of and a in that have i it for not on with he as you do at this but his by from "
    "they she or an will my one all would there their what so up out if about who get which go "
    "me when make can like time no just him know take people into year your good some could "
    "them see other than then now look only come its over think also back after use two how "
    "our work first well way even new want because any these give day most us"
).split()

PUNCTUATION_SENTENCES = [
    "Hello, world! How are you today?",
    "It's a beautiful day; isn't it amazing?",
    "Programming is fun: variables, functions, and objects!",
    "What time is it? It's 3:45 PM on a Tuesday.",
    "She said, \"This is incredible!\" with excitement.",
    "The price is $19.99 (including tax & shipping).",
]

TIMED_CONTENT_TYPES = {
    "mixed": "Mixed Content",
    "words": "Common Words",
    "numbers": "Numbers Only",
    "punctuation": "With Punctuation",
    "programming": "Programming",
    "quotes": "Famous Quotes",
}

_HARD_PUNCT = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


@dataclass(frozen=True)
class Snippet:
    title: str
    description: str
    code: str
    concepts: Tuple[str, ...] = ()
    hints: Tuple[str, ...] = ()


def _snip(title, description, lines, concepts=(), hints=()) -> Snippet:
    return Snippet(title, description, "\n".join(lines), tuple(concepts), tuple(hints))


SNIPPETS: Dict[str, Dict[str, object]] = {
    "javascript": {
        "label": "JavaScript",
        "difficulties": {
            "beginner": [
                _snip("Map and Log", "Duplicate values and print them.",
                      ["const nums = [1, 2, 3]",
                       "const doubled = nums.map(n => n * 2)",
                       "for (const value of doubled) {",
                       "  console.log(value)",
                       "}"],
                      ["Array.map", "Loops"], ["Remember arrow function parentheses."]),
                _snip("Template Greeting", "Return a templated greeting string.",
                      ["function greet(name) {",
                       "  return `Hi ${name}!`",
                       "}",
                       "console.log(greet(\"dev\"))"],
                      ["Template literals", "Functions"], ["Backticks enable interpolation."]),
            ],
            "intermediate": [
                _snip("Reducer Counter", "Handle basic reducer actions.",
                      ["const reducer = (state, action) => {",
                       "  if (action === \"inc\") return state + 1",
                       "  if (action === \"dec\") return state - 1",
                       "  return state",
                       "}"],
                      ["Reducers", "Pure functions"], ["Return new state each time."]),
                _snip("Simple Fetch", "Await a JSON payload.",
                      ["async function loadTodo() {",
                       "  const res = await fetch(\"/api/todo\")",
                       "  return res.json()",
                       "}"],
                      ["Async/await", "fetch"], ["Await both fetch and json."]),
            ],
            "advanced": [
                _snip("Memo Utility", "Cache results by key.",
                      ["const memo = fn => {",
                       "  const cache = new Map()",
                       "  return key => cache.has(key) ? cache.get(key) : cache.set(key, fn(key)).get(key)",
                       "}"],
                      ["Closures", "Maps"], ["Initialize Map once."]),
            ],
        },
    },
    "python": {
        "label": "Python",
        "difficulties": {
            "beginner": [
                _snip("Normalize Scores", "Scale numbers to percentages.",
                      ["def normalize(values):",
                       "    total = sum(values)",
                       "    return [v / total for v in values]",
                       "",
                       "print(normalize([2, 3, 5]))"],
                      ["Comprehensions", "Lists"], ["Guard against zero totals."]),
                _snip("Dict Default", "Pull values with fallbacks.",
                      ["def get_port(settings):",
                       "    return settings.get(\"port\", 8080)",
                       "",
                       "print(get_port({}))"],
                      ["Dictionaries", "Defaults"], ["Use dict.get to provide fallback."]),
            ],
            "intermediate": [
                _snip("Dataclass Point", "Declare a small value type.",
                      ["from dataclasses import dataclass",
                       "",
                       "@dataclass(frozen=True)",
                       "class Point:",
                       "    x: float",
                       "    y: float"],
                      ["Dataclasses", "Type hints"], ["frozen=True makes instances immutable."]),
            ],
            "advanced": [
                _snip("Async Gather", "Run coroutines concurrently.",
                      ["import asyncio",
                       "",
                       "async def main(urls):",
                       "    tasks = [fetch(u) for u in urls]",
                       "    return await asyncio.gather(*tasks)"],
                      ["asyncio", "Coroutines"], ["gather takes awaitables, not a list."]),
            ],
        },
    },
    "go": {
        "label": "Go",
        "difficulties": {
            "beginner": [
                _snip("Hello Loop", "Print a counter.",
                      ["for i := 0; i < 3; i++ {",
                       "\tfmt.Println(i)",
                       "}"],
                      ["Loops"], ["Go has no parentheses around loop clauses."]),
            ],
            "intermediate": [
                _snip("Error Return", "Return a value and an error.",
                      ["func parse(s string) (int, error) {",
                       "\treturn strconv.Atoi(s)",
                       "}"],
                      ["Errors", "Multiple returns"], ["Errors are ordinary values."]),
            ],
            "advanced": [
                _snip("Worker Channel", "Fan work out to a goroutine.",
                      ["jobs := make(chan int)",
                       "go func() {",
                       "\tfor j := range jobs {",
                       "\t\tfmt.Println(j)",
                       "\t}",
                       "}()"],
                      ["Goroutines", "Channels"], ["range over a channel stops when it is closed."]),
            ],
        },
    },
}


@dataclass(frozen=True)
class TextCriteria:
    category: str = "quotes"
    difficulty: str = "medium"   # easy | medium | hard
    length: str = "medium"       # short | medium | long


class ContentLibrary:
    """
    Supplies target texts. Built-in categories can be overridden by
    blank-line separated blocks in ``<assets_dir>/<category>.txt``.
    """

    def __init__(self, custom_path: Optional[Path] = None, assets_dir: Optional[Path] = None,
                 rng: Optional[random.Random] = None):
        self.custom_path = custom_path
        self.assets_dir = assets_dir or Path("assets/texts")
        self.rng = rng or random.Random()
        self.custom_texts: List[Dict[str, str]] = self._load_custom()

    # ---------------- categories ----------------
    @property
    def categories(self) -> List[str]:
        return list(LIBRARY.keys())

    def _load_blocks(self, category: str) -> List[str]:
        p = self.assets_dir / f"{category}.txt"
        if not p.exists():
            return []
        try:
            txt = p.read_text(encoding="utf-8").strip()
        except OSError as e:
            log.warning("Could not read %s: %s", p, e)
            return []
        return [b.strip() for b in txt.split("\n\n") if b.strip()]

    def texts_for(self, category: str) -> List[str]:
        texts = self._load_blocks(category) or list(LIBRARY.get(category) or LIBRARY["quotes"])
        return texts + [t["text"] for t in self.custom_texts]

    def texts_for_difficulty(self, category: str, difficulty: str) -> List[str]:
        texts = self.texts_for(category)
        if difficulty == "easy":
            picked = [t for t in texts if len(t) < 150 and not _HARD_PUNCT.search(t)]
        elif difficulty == "hard":
            picked = [t for t in texts if len(t) > 100]
        else:
            picked = texts
        return picked or texts

    def get_text(self, criteria: TextCriteria | None = None) -> str:
        criteria = criteria or TextCriteria()
        pool = self.texts_for_difficulty(criteria.category, criteria.difficulty)
        if not pool:
            return FALLBACK_TEXT
        text = self.rng.choice(pool)
        if criteria.length == "short":
            text = text[:100].rstrip()
        elif criteria.length == "long":
            while len(text) < 300:
                text += " " + self.rng.choice(pool)
        return text or FALLBACK_TEXT

    def stats(self, category: str) -> Dict[str, int]:
        texts = self.texts_for(category)
        return {
            "total_texts": len(texts),
            "average_length": round(sum(len(t) for t in texts) / len(texts)) if texts else 0,
            "categories": len(LIBRARY),
            "custom_texts": len(self.custom_texts),
        }

    # ---------------- custom texts ----------------
    def _load_custom(self) -> List[Dict[str, str]]:
        if not self.custom_path or not self.custom_path.exists():
            return []
        try:
            data = json.loads(self.custom_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable custom texts %s: %s", self.custom_path, e)
            return []
        out = []
        for item in data if isinstance(data, list) else []:
            if isinstance(item, dict) and item.get("text"):
                out.append({"title": str(item.get("title") or "Custom Text"), "text": str(item["text"])})
        return out

    def _save_custom(self) -> None:
        if not self.custom_path:
            return
        try:
            self.custom_path.parent.mkdir(parents=True, exist_ok=True)
            self.custom_path.write_text(
                json.dumps(self.custom_texts, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as e:
            log.warning("Failed to save custom texts: %s", e)

    def add_custom_text(self, text: str, title: str = "") -> int:
        text = normalize_text(text)
        if not text:
            raise ContentError("Custom text is empty")
        self.custom_texts.append({"title": sanitize_title(title) or "Custom Text", "text": text})
        self._save_custom()
        return len(self.custom_texts) - 1

    def remove_custom_text(self, index: int) -> None:
        if not 0 <= index < len(self.custom_texts):
            raise ContentError(f"No custom text at index {index}")
        del self.custom_texts[index]
        self._save_custom()

    # ---------------- timed tests ----------------
    def common_words(self, count: int = 150) -> str:
        return " ".join(self.rng.choice(COMMON_WORDS) for _ in range(count))

    def number_text(self, count: int = 100) -> str:
        return " ".join(str(self.rng.randrange(10000)) for _ in range(count))

    def generate_timed_text(self, content_type: str = "mixed", include_numbers: bool = True,
                            include_punctuation: bool = True, include_capitals: bool = True) -> str:
        if content_type == "numbers":
            base = self.number_text()
        elif content_type == "programming":
            base = self.rng.choice(LIBRARY["programming"])
        elif content_type == "quotes":
            base = self.rng.choice(self.texts_for("quotes"))
        elif content_type == "punctuation":
            base = " ".join(PUNCTUATION_SENTENCES)
        elif content_type == "words":
            base = self.common_words()
        else:
            base = self.get_text()

        if not include_numbers:
            base = re.sub(r"\d", "", base)
        if not include_punctuation:
            base = re.sub(r"[^\w\s]", "", base)
        if not include_capitals:
            base = base.lower()
        base = re.sub(r"\s+", " ", base).strip()

        if not base:
            base = self.common_words()
        if len(base) < TIMED_MIN_LENGTH:
            repeat = base[:100]
            while len(base) < TIMED_MIN_LENGTH:
                base += " " + repeat
        return base.strip()

    # ---------------- developer snippets ----------------
    @staticmethod
    def languages() -> Dict[str, str]:
        return {key: str(lang["label"]) for key, lang in SNIPPETS.items()}

    @staticmethod
    def snippets(language: str, difficulty: str) -> List[Snippet]:
        lang = SNIPPETS.get(language)
        if not lang:
            return []
        return list(lang["difficulties"].get(difficulty, []))

    def snippet(self, language: str, difficulty: str, index: Optional[int] = None) -> Snippet:
        items = self.snippets(language, difficulty)
        if not items:
            raise ContentError(f"No snippets for {language}/{difficulty}")
        if index is None:
            return self.rng.choice(items)
        return items[index % len(items)]

    @staticmethod
    def snippet_target(snippet: Snippet) -> str:
        return normalize_text(snippet.code)
