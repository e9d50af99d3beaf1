from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Dict, List, Optional

SYSTEM_PROMPT = (
    "You are a customer-support assistant. Answer the user's question briefly. "
    'Reply with a single JSON object: {"reply": string, "escalated": boolean, "confidence": number}. '
    "Set escalated to true and confidence low when the issue needs a human agent "
    "(account access, payments, security)."
)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class LocalSupportLLM:
    """Local chat model that answers one support message as a JSON reply.

    transformers/torch are imported on first use, so the gateway starts
    without them when the AI fallback is disabled.
    """

    def __init__(
        self,
        model_id: str,
        quantization: str = "int4",
        max_new_tokens: int = 256,
        temperature: float = 0.2,
        top_p: float = 0.9,
        max_input_chars: int = 2000,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self.model_id = model_id
        self.quantization = quantization
        self.max_new_tokens = max_new_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.max_input_chars = max_input_chars
        self.system_prompt = system_prompt
        self._model = None
        self._tokenizer = None

    def _quantization_config(self) -> Any:
        import torch
        from transformers import BitsAndBytesConfig  # type: ignore

        quant = (self.quantization or "").lower()
        if quant in {"int4", "4bit", "4-bit"}:
            return BitsAndBytesConfig(
                load_in_4bit=True,
                bnb_4bit_compute_dtype=torch.float16,
                bnb_4bit_use_double_quant=True,
                bnb_4bit_quant_type="nf4",
            )
        if quant in {"int8", "8bit", "8-bit"}:
            return BitsAndBytesConfig(load_in_8bit=True)
        return None

    def _ensure_model(self) -> None:
        if self._model is not None and self._tokenizer is not None:
            return
        import torch
        from transformers import AutoModelForCausalLM, AutoTokenizer  # type: ignore

        self._tokenizer = AutoTokenizer.from_pretrained(self.model_id, trust_remote_code=True)
        self._model = AutoModelForCausalLM.from_pretrained(
            self.model_id,
            device_map="auto",
            torch_dtype=torch.float16,
            quantization_config=self._quantization_config(),
            trust_remote_code=True,
        )
        self._model.eval()

    def build_messages(self, message: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": message.strip()[: self.max_input_chars]},
        ]

    def reply_json(self, message: str) -> str:
        """Blocking generation; returns the raw model text, expected to hold a JSON object."""
        self._ensure_model()
        tokenizer = self._tokenizer
        model = self._model
        if tokenizer is None or model is None:
            return ""
        input_ids = tokenizer.apply_chat_template(
            self.build_messages(message), add_generation_prompt=True, return_tensors="pt"
        ).to(model.device)
        sampling: Dict[str, Any] = {"do_sample": False}
        if self.temperature > 0:
            sampling = {"do_sample": True, "temperature": self.temperature, "top_p": self.top_p}
        outputs = model.generate(
            input_ids,
            max_new_tokens=self.max_new_tokens,
            eos_token_id=tokenizer.eos_token_id,
            pad_token_id=tokenizer.eos_token_id,
            **sampling,
        )
        return tokenizer.decode(outputs[0][input_ids.shape[-1]:], skip_special_tokens=True).strip()


class LLMFallbackResponder:
    """Asks an LLM for a structured reply when no rule matched.

    Generation is blocking, so it runs in a worker thread; callers bound it with
    a timeout and drop the result if they stop waiting.
    """

    def __init__(self, llm: Any) -> None:
        self.llm = llm

    async def consult(self, message: str) -> Dict[str, Any]:
        text = await asyncio.to_thread(self.llm.reply_json, message)
        return parse_structured_reply(text)


def parse_structured_reply(text: str) -> Dict[str, Any]:
    found = JSON_OBJECT_RE.search(text or "")
    if not found:
        raise ValueError("LLM output contains no JSON object")
    data = json.loads(found.group(0))
    if not isinstance(data, dict):
        raise ValueError("LLM output is not a JSON object")
    return data


def build_fallback_responder(config: Dict[str, Any]) -> Optional[LLMFallbackResponder]:
    ai_cfg = config.get("fallback", {}).get("ai", {})
    if not ai_cfg.get("enabled", False):
        return None
    llm = LocalSupportLLM(
        model_id=ai_cfg.get("model_id", "Qwen/Qwen2.5-1.5B-Instruct"),
        quantization=ai_cfg.get("quantization", "int4"),
        max_new_tokens=ai_cfg.get("max_new_tokens", 256),
        temperature=ai_cfg.get("temperature", 0.2),
    )
    return LLMFallbackResponder(llm)
