"""Loading of the rate limit rule configuration.

Rules are read once at startup from JSON, either inline
(``APP_RATE_LIMIT_RULES``) or from a file (``APP_RATE_LIMIT_RULES_FILE``).
Both a bare array and an object with a ``rules`` array are accepted:

    [{"accountId": "acct1", "allowedNumberOfRequests": 2, "timeInterval": "MINUTE"}]
    {"rules": [{"clientIp": "", "allowedNumberOfRequests": 100, "timeInterval": "HOUR"}]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from ratelimiter.core.config import AppSettings, settings
from ratelimiter.core.errors import ConfigurationAppError
from ratelimiter.schemas.rate_limit import RateLimitRule

logger = logging.getLogger(__name__)

_rules_adapter = TypeAdapter(List[RateLimitRule])


def parse_rules(document: str, *, source: str = "inline") -> tuple[RateLimitRule, ...]:
    """Parse a JSON rule document.

    Args:
        document: JSON text.
        source: Where the document came from, for error reporting.

    Returns:
        Rules in order of first appearance with duplicates removed.

    Raises:
        ConfigurationAppError: If the document is not valid JSON, is not a rule
            array (bare or under ``rules``), or a rule is invalid.
    """
    try:
        payload: Any = json.loads(document)
    except json.JSONDecodeError as exc:
        raise ConfigurationAppError(
            code="rules_invalid_json",
            message=f"Rate limit rules are not valid JSON: {exc.msg}",
            details={"source": source},
        ) from exc

    if isinstance(payload, dict):
        if "rules" not in payload:
            raise ConfigurationAppError(
                code="rules_invalid",
                message="Rate limit rule object must contain a 'rules' array",
                details={"source": source, "hint": f"found keys: {sorted(payload)[:5]}"},
            )
        payload = payload["rules"]
    elif not isinstance(payload, list):
        raise ConfigurationAppError(
            code="rules_invalid",
            message="Rate limit rules must be a JSON array or an object with a 'rules' array",
            details={"source": source},
        )

    try:
        rules = _rules_adapter.validate_python(payload)
    except ValidationError as exc:
        raise ConfigurationAppError(
            code="rules_invalid",
            message=f"Invalid rate limit rule configuration ({exc.error_count()} errors)",
            details={"source": source, "hint": str(exc.errors()[:3])},
        ) from exc

    return tuple(dict.fromkeys(rules))


def load_rate_limit_rules(app_settings: AppSettings | None = None) -> tuple[RateLimitRule, ...]:
    """Load the configured rule set.

    Inline rules take precedence over the rules file. With neither configured
    the rule set is empty and every request is admitted.

    Raises:
        ConfigurationAppError: If the file is unreadable or its content invalid.
    """
    cfg = app_settings or settings.app

    if cfg.rate_limit_rules:
        rules = parse_rules(cfg.rate_limit_rules, source="inline")
    elif cfg.rate_limit_rules_file:
        path = Path(cfg.rate_limit_rules_file)
        try:
            document = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationAppError(
                code="rules_file_unreadable",
                message=f"Cannot read rate limit rules file: {path}",
                details={"source": str(path)},
            ) from exc
        rules = parse_rules(document, source=str(path))
    else:
        logger.warning("rate_limit.rules_not_configured")
        return ()

    logger.info("rate_limit.rules_loaded", extra={"rule_count": len(rules)})
    return rules
