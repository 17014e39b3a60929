from dataclasses import dataclass
from typing import Any, Dict, Optional
from loguru import logger

from graph.state import Language

FALLBACK_REPLY = (
    "Thank you for your interest! Please share more details about your needs, "
    "and we'll help you find the perfect solution."
)

# WhatsApp replies are read on a phone; keep them short.
MAX_REPLY_TOKENS = 150
TEMPERATURE = 0.7

SYSTEM_PROMPTS: Dict[Language, str] = {
    Language.EN: (
        "You are a helpful sales assistant for Priyadarshini Filaments. You help customers "
        "with agricultural products including Agrotech, Hometech, Aquatech, Indutech, and "
        "Packtech. Be professional, conversational, and helpful. Ask about their needs and "
        "provide relevant product information. Keep responses concise (under 160 characters "
        "for WhatsApp)."
    ),
    Language.HI: (
        "आप Priyadarshini Filaments के लिए एक सहायक विक्रय प्रतिनिधि हैं। कृपया पेशेदार और "
        "मैत्रीपूर्ण रहें। उनके उत्पाद की रुचि और कृषि आवश्यकताओं के बारे में पूछें। संक्षिप्त उत्तर दें।"
    ),
    Language.KN: (
        "ನೀವು Priyadarshini Filaments ಗಾಗಿ ಸಹಾಯಕ ಮಾರಾಟ ಪ್ರತಿನಿಧಿ. ವೃತ್ತಿಪರ ಮತ್ತು ಸಹಾಯಕವಾಗಿ ಇರಿ. "
        "ಸಂಕ್ಷಿಪ್ತ ಉತ್ತರ ನೀಡಿ।"
    ),
    Language.TA: (
        "நீங்கள் Priyadarshini Filaments க்கான உதவிக் கொடுக்கும் விற்பனை பிரதிநிதி. தொழிலாக "
        "மற்றும் உரையாடல் நிலையில் இருக்கவும். சுருக்கமான பதில் கொடுக்கவும்।"
    ),
    Language.TE: (
        "మీరు Priyadarshini Filaments కోసం సహాయక విక్రయ ప్రతినిధి. నిపుణమైన మరియు సంభాషణ "
        "కలిగిఉండండి. సంక్షిప్త సమాధానం ఇవ్వండి।"
    ),
}

_missing_prompts = set(Language) - set(SYSTEM_PROMPTS)
if _missing_prompts:
    raise RuntimeError(f"No system prompt for languages: {sorted(l.value for l in _missing_prompts)}")


def system_prompt_for(language: Optional[Language]) -> str:
    return SYSTEM_PROMPTS.get(language, SYSTEM_PROMPTS[Language.EN])


@dataclass
class ReplyResult:
    text: str
    fallback: bool = False
    error: Optional[str] = None


class CompletionClient:
    """OpenAI chat-completion client that produces WhatsApp replies."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4",
                 timeout: float = 20.0, client: Any = None):
        self.model = model
        self.timeout = timeout
        self.client = client

        if self.client is None and api_key:
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

        if self.client is None:
            logger.warning("No OpenAI API key provided, every reply will use the fallback text")

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def get_reply(self, user_message: str, language: Language, sender_name: str) -> ReplyResult:
        """
        Ask the model for a reply to one customer message.

        Args:
            user_message: Text the customer sent
            language: Detected language, selects the system prompt
            sender_name: Customer display name

        Returns:
            ReplyResult with the trimmed reply, or the fallback text on any failure
        """
        if not self.client:
            return ReplyResult(text=FALLBACK_REPLY, fallback=True, error="completion client not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt_for(language)},
                    {"role": "user", "content": f"Customer name: {sender_name}\nMessage: {user_message}"}
                ],
                max_tokens=MAX_REPLY_TOKENS,
                temperature=TEMPERATURE
            )

            content = response.choices[0].message.content.strip()
            if not content:
                raise ValueError("empty completion")

            logger.info(f"Completion received ({len(content)} chars)")
            return ReplyResult(text=content)

        except Exception as e:
            logger.error(f"OpenAI completion failed: {e}")
            return ReplyResult(text=FALLBACK_REPLY, fallback=True, error=str(e))
