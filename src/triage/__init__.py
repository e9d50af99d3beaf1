from .loader import load_knowledge_base, parse_knowledge_base
from .normalizer import normalize
from .pipeline import ChatPipeline

__all__ = ["ChatPipeline", "load_knowledge_base", "normalize", "parse_knowledge_base"]
