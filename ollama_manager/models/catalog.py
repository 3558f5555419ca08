"""
Ollama Manager v2.0 - Model Catalog
Static list of known models with size, RAM requirement and category
"""

import json
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional

from .config import get_paths


@dataclass
class ModelInfo:
    name: str
    size: str
    ram_req: int
    vram_req: int
    category: str
    description: str

    def to_entry(self) -> Dict:
        entry = asdict(self)
        del entry["name"]
        return entry


def _m(name, size, ram_req, category, description, vram_req=0) -> ModelInfo:
    return ModelInfo(name, size, ram_req, vram_req, category, description)


# Order matters: listings and per-category suggestions follow it
CATALOG: List[ModelInfo] = [
    _m("llama3.1", "8B", 8, "chat", "Latest LLaMA model, excellent for conversation"),
    _m("llama3.1:70b", "70B", 64, "chat", "Large LLaMA model, exceptional quality"),
    _m("mistral", "7B", 8, "chat", "Fast and efficient chat model"),
    _m("mistral-nemo", "12B", 16, "chat", "Improved Mistral with better reasoning"),
    _m("codellama", "7B", 8, "coding", "Specialized for code generation"),
    _m("codellama:13b", "13B", 16, "coding", "Larger code model, better performance"),
    _m("deepseek-coder", "6.7B", 8, "coding", "Excellent for coding tasks"),
    _m("phi3", "3.8B", 4, "chat", "Small but capable Microsoft model"),
    _m("phi3:medium", "14B", 16, "chat", "Medium-sized Phi model"),
    _m("gemma2", "9B", 12, "chat", "Google's latest Gemma model"),
    _m("gemma2:27b", "27B", 32, "chat", "Large Gemma model"),
    _m("qwen2", "7B", 8, "chat", "Alibaba's multilingual model"),
    _m("llava", "7B", 8, "vision", "Vision-language model"),
    _m("nomic-embed-text", "0.3B", 2, "embedding", "Text embeddings model"),
    _m("all-minilm", "0.1B", 1, "embedding", "Lightweight embeddings"),
    _m("neural-chat", "7B", 8, "chat", "Intel's optimized chat model"),
    _m("starling-lm", "7B", 8, "chat", "High-quality chat model"),
    _m("solar", "10.7B", 12, "chat", "Upstage Solar model"),
    _m("openchat", "7B", 8, "chat", "OpenChat conversational model"),
    _m("vicuna", "7B", 8, "chat", "Fine-tuned LLaMA for conversation"),
    _m("wizard-vicuna-uncensored", "7B", 8, "creative", "Uncensored creative model"),
    _m("orca-mini", "3B", 4, "chat", "Small efficient model"),
    _m("tinydolphin", "1.1B", 2, "chat", "Tiny but capable model"),
    _m("stable-code", "3B", 4, "coding", "Stable AI's code model"),
    _m("magicoder", "7B", 8, "coding", "Advanced coding assistant"),
    _m("yi", "6B", 8, "chat", "01.AI's multilingual model"),
]


def write_catalog(path: Optional[Path] = None) -> Path:
    """Regenerate models.json from the built-in template"""
    path = path or get_paths().models_db
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"models": {m.name: m.to_entry() for m in CATALOG}}
    with open(path, "w") as f:
        json.dump(data, f, indent=4)
    return path


def load_catalog(path: Optional[Path] = None) -> List[ModelInfo]:
    """Write the catalog then read it back, like every screen that uses it"""
    path = write_catalog(path)
    with open(path) as f:
        data = json.load(f)
    return [ModelInfo(name=name, **entry) for name, entry in data.get("models", {}).items()]


def compatible_models(
    ram_gb: int,
    category: Optional[str] = None,
    models: Optional[List[ModelInfo]] = None,
) -> List[ModelInfo]:
    """Models fitting in ram_gb, optionally limited to one category"""
    models = CATALOG if models is None else models
    return [
        m for m in models
        if (category is None or m.category == category) and m.ram_req <= ram_gb
    ]


def search_models(term: str, models: Optional[List[ModelInfo]] = None) -> List[ModelInfo]:
    """Match term against name, category and description.

    The term is treated as a case-insensitive regular expression; if it does
    not compile it is matched literally.
    """
    models = CATALOG if models is None else models
    try:
        pattern = re.compile(term, re.IGNORECASE)
    except re.error:
        pattern = re.compile(re.escape(term), re.IGNORECASE)

    return [
        m for m in models
        if pattern.search(m.name) or pattern.search(m.category) or pattern.search(m.description)
    ]
