"""
Ollama Manager - console helpers
"""

from typing import Callable, List, Optional

from .models.config import SCRIPT_VERSION

InputFn = Callable[[str], str]


def print_banner():
    print(f"                🦙 OLLAMA MANAGER v{SCRIPT_VERSION}")
    print("         Advanced AI Model Management Suite For OLLAMA")
    print(" ═══════════════════════════════════════════════════════════ ")
    print()


def print_header(text: str):
    print(f"\n==> {text}")


def print_success(text: str):
    print(f"✅ {text}")


def print_error(text: str):
    print(f"❌ {text}")


def print_warning(text: str):
    print(f"⚠️  {text}")


def print_info(text: str):
    print(f"ℹ️  {text}")


def ask(prompt: str, input_fn: InputFn = input) -> str:
    try:
        return input_fn(prompt).strip()
    except EOFError:
        return ""


def confirm(question: str, input_fn: InputFn = input) -> bool:
    """y/N prompt, anything but y/yes is no"""
    answer = ask(f"{question} [y/N]: ", input_fn)
    return answer.lower().startswith("y")


def parse_choice(raw: str, count: int) -> Optional[int]:
    """1-based menu input to a 0-based index, None when invalid"""
    raw = raw.strip()
    if not raw.isdigit():
        return None
    choice = int(raw)
    if 1 <= choice <= count:
        return choice - 1
    return None


def parse_selection(raw: str, count: int) -> List[int]:
    """Space-separated numbers or 'all' to 0-based indices.

    Tokens that are not numbers in range are dropped.
    """
    raw = raw.strip()
    if raw == "all":
        return list(range(count))
    indices = []
    for token in raw.split():
        idx = parse_choice(token, count)
        if idx is not None:
            indices.append(idx)
    return indices


def multi_choice(title: str, options: List[str], input_fn: InputFn = input) -> Optional[int]:
    """Numbered menu; returns the 0-based pick or None"""
    print(title)
    for i, option in enumerate(options, 1):
        print(f"[{i}] {option}")
    return parse_choice(ask(f"Select option [1-{len(options)}]: ", input_fn), len(options))


def human_size(num_bytes: float) -> str:
    """du -h style size"""
    for unit in ("B", "K", "M", "G"):
        if num_bytes < 1024:
            return f"{num_bytes:.0f}{unit}" if unit == "B" else f"{num_bytes:.1f}{unit}"
        num_bytes /= 1024
    return f"{num_bytes:.1f}T"
