"""Security advice for detected secrets.

Advice comes from a generative-language API when a credential is
configured, and from a deterministic template otherwise. Every failure on
the remote path collapses to the template, so callers always get advice.

Only the secret type, its redacted value, severity and line number are sent
to the remote service. Raw values, surrounding code and file paths never
leave the machine.
"""

import asyncio
import json
import logging
import re
from typing import List, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from keyleaks.core.exceptions import (
    InvalidResponseError,
    RemoteAdvisoryError,
    RemoteStatusError,
    ResponseParseError,
    TransportError,
)
from keyleaks.core.models import (
    AdviceOutcome,
    AdviceSource,
    SecretMatch,
    SecurityAdvice,
    Severity,
    Urgency,
)
from keyleaks.core.redactor import redact

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-pro"
DEFAULT_TIMEOUT_SECONDS = 30

DEFAULT_DESCRIPTION = "A secret was detected in your code."
DEFAULT_RECOMMENDATION = "Rotate the exposed credential immediately"
MAX_EXTRACTED_RECOMMENDATIONS = 5
MAX_EXTRACTED_DESCRIPTION = 300

_STRUCTURED_RE = re.compile(r"\{[\s\S]*\}")
_BULLET_RE = re.compile(r"^[-*•]\s*")

REVOCATION_STEPS = (
    (
        "API Key",
        [
            "Log into the service provider dashboard",
            "Navigate to API Keys / Credentials section",
            "Revoke or delete the exposed key",
            "Generate a new key with appropriate permissions",
            "Update your application configuration with the new key",
        ],
    ),
    (
        "Token",
        [
            "Log into the service provider dashboard",
            "Revoke the exposed token",
            "Generate a new token",
            "Update your application configuration",
        ],
    ),
    (
        "Private Key",
        [
            "Generate a new key pair",
            "Update the public key in authorized systems",
            "Remove the old key from all systems",
            "Update your application configuration",
        ],
    ),
)

PROMPT_TEMPLATE = """You are a security expert. A developer has accidentally exposed a {type} in their code.

Secret Type: {type}
Redacted Secret: {redacted}
Severity: {severity}
Line Number: {line}

Please provide:
1. A brief title for the security issue
2. A description of why this is dangerous
3. Specific actionable recommendations (3-5 items)
4. Step-by-step revocation instructions if applicable
5. Urgency level (critical/high/medium/low)

Format your response as a structured JSON object with these fields:
- title (string)
- description (string)
- recommendations (array of strings)
- urgency (string: "critical" | "high" | "medium" | "low")
- revocationSteps (optional array of strings)

Be concise and actionable. Focus on immediate steps to secure the exposed credential."""


class RemoteAdvice(BaseModel):
    """Advice object embedded in a model response. Bad fields become None."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    recommendations: Optional[List[str]] = None
    urgency: Optional[Urgency] = None
    revocation_steps: Optional[List[str]] = Field(default=None, alias="revocationSteps")

    @field_validator("title", "description", mode="before")
    @classmethod
    def _non_empty_text(cls, value):
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @field_validator("recommendations", "revocation_steps", mode="before")
    @classmethod
    def _string_list(cls, value):
        if not isinstance(value, list):
            return None
        items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return items or None

    @field_validator("urgency", mode="before")
    @classmethod
    def _known_urgency(cls, value):
        if isinstance(value, str) and value.strip().lower() in {u.value for u in Urgency}:
            return value.strip().lower()
        return None


def build_prompt(match: SecretMatch) -> str:
    """Privacy-preserving prompt: type, redacted value, severity and line only."""
    return PROMPT_TEMPLATE.format(
        type=match.type,
        redacted=redact(match.value),
        severity=match.severity.value,
        line=match.line,
    )


def _default_urgency(match: SecretMatch) -> Urgency:
    return Urgency.HIGH if match.severity == Severity.HIGH else Urgency.MEDIUM


def parse_structured_advice(text: str, match: SecretMatch) -> SecurityAdvice:
    """
    Build advice from the first JSON object embedded in ``text``.

    Raises:
        ResponseParseError: If no well-formed object is present
    """
    found = _STRUCTURED_RE.search(text)
    if not found:
        raise ResponseParseError("No structured object in response", text)

    try:
        data = json.loads(found.group(0))
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Malformed structured object: {e}", text)
    if not isinstance(data, dict):
        raise ResponseParseError("Structured response is not an object", text)

    try:
        parsed = RemoteAdvice.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(f"Invalid advice object: {e}", text)

    return SecurityAdvice(
        title=parsed.title or f"Security Issue: {match.type}",
        description=parsed.description or DEFAULT_DESCRIPTION,
        recommendations=parsed.recommendations or [DEFAULT_RECOMMENDATION],
        urgency=parsed.urgency or _default_urgency(match),
        revocation_steps=parsed.revocation_steps,
    )


def extract_unstructured_advice(text: str, match: SecretMatch) -> SecurityAdvice:
    """Best-effort advice from free text: first five non-empty lines, bullets stripped."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    recommendations = [
        _BULLET_RE.sub("", line) for line in lines[:MAX_EXTRACTED_RECOMMENDATIONS]
    ]
    recommendations = [r for r in recommendations if r]

    return SecurityAdvice(
        title=f"Security Issue: {match.type}",
        description=text[:MAX_EXTRACTED_DESCRIPTION] or DEFAULT_DESCRIPTION,
        recommendations=recommendations or [DEFAULT_RECOMMENDATION],
        urgency=_default_urgency(match),
    )


def fallback_advice(match: SecretMatch) -> SecurityAdvice:
    """Deterministic advice used when the remote service is absent or failing."""
    recommendations = [
        f"Rotate the exposed {match.type} immediately",
        "Review your Git history and remove the secret from commit history",
        "Update the secret in all environments (development, staging, production)",
        "Enable secret scanning in your CI/CD pipeline",
        "Review who had access to the exposed credential and assess impact",
    ]

    # Literal substring match on the detector name: "AWS Secret Key" gets no steps.
    revocation_steps = None
    for keyword, steps in REVOCATION_STEPS:
        if keyword in match.type:
            revocation_steps = list(steps)
            break

    return SecurityAdvice(
        title=f"Security Alert: {match.type} Detected",
        description=(
            f"A {match.type.lower()} has been detected in your code. This is a security "
            "risk as secrets should never be committed to version control or hardcoded "
            "in source files."
        ),
        recommendations=recommendations,
        urgency=Urgency.CRITICAL if match.severity == Severity.HIGH else Urgency.HIGH,
        revocation_steps=revocation_steps,
    )


class SecurityAdvisor:
    """
    Produces remediation advice for detected secrets.

    Each request opens its own HTTP session, so concurrent requests never
    share connection state. A request that has been sent cannot be
    cancelled; it either completes or hits the timeout.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the advisor.

        Args:
            api_key: Generative-language API key; blank or None means offline
            model: Model name used in the request path
            base_url: API base URL
            timeout: Total request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def get_advice(self, match: SecretMatch) -> AdviceOutcome:
        """
        Get advice for a single match. Never raises.

        Args:
            match: The detected secret

        Returns:
            Outcome holding the advice and the path that produced it
        """
        if not self.has_credential:
            return AdviceOutcome(advice=fallback_advice(match), source=AdviceSource.FALLBACK)

        try:
            text = await self._request_completion(build_prompt(match))
        except RemoteAdvisoryError as e:
            warning = f"Failed to get AI advice: {e.message}. Showing default advice."
            logger.warning(warning)
            return AdviceOutcome(
                advice=fallback_advice(match),
                source=AdviceSource.FALLBACK,
                warning=warning,
            )

        try:
            advice = parse_structured_advice(text, match)
        except ResponseParseError as e:
            logger.info("Unstructured advice response for %s: %s", match.type, e.message)
            return AdviceOutcome(
                advice=extract_unstructured_advice(text, match),
                source=AdviceSource.UNSTRUCTURED,
            )

        return AdviceOutcome(advice=advice, source=AdviceSource.REMOTE)

    def _create_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=self.timeout)

    async def _request_completion(self, prompt: str) -> str:
        """
        POST the prompt and return the generated text.

        Raises:
            TransportError: On connection failure or timeout
            RemoteStatusError: On any non-200 status
            InvalidResponseError: If a 200 body lacks candidate text
        """
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            async with self._create_session() as session:
                async with session.post(
                    self.endpoint, params={"key": self.api_key}, json=payload
                ) as resp:
                    # Bodies may hold invalid UTF-8
                    body = (await resp.read()).decode("utf-8", errors="replace")
                    if resp.status != 200:
                        raise RemoteStatusError(resp.status, body)
        except asyncio.TimeoutError:
            raise TransportError("Request timeout")
        except aiohttp.ClientError as e:
            raise TransportError(f"Request failed: {e}")

        return self._extract_text(body)

    @staticmethod
    def _extract_text(body: str) -> str:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(f"Failed to parse response: {e}")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None

        if not isinstance(text, str) or not text:
            raise InvalidResponseError("Invalid response format from Gemini API")
        return text


async def get_security_advice(match: SecretMatch, api_key: Optional[str] = None, **kwargs) -> SecurityAdvice:
    """Advice for ``match``; falls back to the template on any failure."""
    outcome = await SecurityAdvisor(api_key=api_key, **kwargs).get_advice(match)
    return outcome.advice


def get_security_advice_sync(match: SecretMatch, api_key: Optional[str] = None, **kwargs) -> SecurityAdvice:
    """
    Synchronous wrapper for getting advice.

    Args:
        match: The detected secret
        api_key: Generative-language API key (optional)
        **kwargs: Passed through to SecurityAdvisor

    Returns:
        Security advice
    """
    return asyncio.run(get_security_advice(match, api_key=api_key, **kwargs))
