"""Rule-based conversational advisor for utility bill questions.

Messages are matched against an ordered list of keyword rules; the first rule
whose keywords appear in the lower-cased message produces the reply. Matching is
plain substring containment, so "hi" also matches inside "this" or "which".
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from billtracker.config import settings
from billtracker.db.base import BillStore
from billtracker.errors import EmptyMessage
from billtracker.models import UtilityType

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    """Advisor response categories, in matching priority order."""

    GREETING = "greeting"
    SAVING_TIPS = "saving_tips"
    BILL_SUMMARY = "bill_summary"
    ELECTRICITY_TIPS = "electricity_tips"
    WATER_TIPS = "water_tips"
    GAS_TIPS = "gas_tips"
    THANKS = "thanks"
    HELP = "help"


GREETING_REPLY = "Hello! How can I help with your utility bills today? 💡"

HIGH_USAGE_TIPS = (
    "I notice your latest bill shows {units} units consumed, which is quite high! "
    "Here are some energy-saving tips:\n\n"
    "🔌 Unplug devices when not in use\n"
    "💡 Switch to LED bulbs\n"
    "🌡️ Set AC to 24°C or higher\n"
    "🧺 Use cold water for washing\n"
    "📱 Consider energy-efficient appliances"
)

EFFICIENT_USAGE_REPLY = (
    "Great job keeping your energy consumption efficient! 🌱\n\n"
    "Keep up the good work with these habits:\n"
    "✅ Turn off lights when leaving rooms\n"
    "✅ Use natural light during daytime\n"
    "✅ Regular maintenance of appliances"
)

BILL_SUMMARY_TEMPLATE = (
    "Your latest {utility}bill shows {units} units consumed in {month} {year} for ₹{amount}.\n\n"
    "Average consumption: {avg_units:.1f} units\n"
    "Average amount: ₹{avg_amount:.2f}\n"
    "Cost per unit: ₹{cost_per_unit:.3f}"
)

NO_BILLS_FOR_UTILITY_REPLY = "No bills found for that utility type."
NO_BILLS_REPLY = "I don't see any bills in your account yet. Add your first bill to get started! 📊"

ELECTRICITY_TIPS = (
    "💡 Electricity saving tips:\n\n"
    "• Use power strips to easily turn off multiple devices\n"
    "• Replace old appliances with Energy Star models\n"
    "• Use ceiling fans instead of AC when possible\n"
    "• Run dishwasher and washing machine with full loads"
)

WATER_TIPS = (
    "💧 Water saving tips:\n\n"
    "• Fix leaky faucets immediately\n"
    "• Install low-flow showerheads\n"
    "• Turn off tap while brushing teeth\n"
    "• Use dishwasher instead of hand washing"
)

GAS_TIPS = (
    "🔥 Gas saving tips:\n\n"
    "• Lower water heater temperature to 120°F\n"
    "• Use cold water for laundry when possible\n"
    "• Seal windows and doors to prevent heat loss\n"
    "• Maintain your heating system regularly"
)

THANKS_REPLY = "You're welcome! Happy to help you save energy and money! 🌟"

HELP_REPLY = (
    "I can help you with utility bills and energy-saving tips! "
    "Ask me about electricity, water, or gas bills, or request energy-saving advice. 💡"
)


def _fmt_number(value: float) -> str:
    """Render whole numbers without a trailing '.0'."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _mentioned_utility(text: str) -> UtilityType | None:
    """First utility named in the message, checked electricity, water, gas."""
    for utility in UtilityType:
        if utility.value in text:
            return utility
    return None


def _saving_tips_reply(text: str, store: BillStore) -> str:
    latest = store.find_latest_created()
    # No bills at all falls through to the efficient-usage reply
    if latest is not None and latest.units_consumed > settings.high_usage_units:
        return HIGH_USAGE_TIPS.format(units=_fmt_number(latest.units_consumed))
    return EFFICIENT_USAGE_REPLY


def _bill_summary_reply(text: str, store: BillStore) -> str:
    utility = _mentioned_utility(text)
    bills = store.list_all(utility)

    if not bills:
        return NO_BILLS_FOR_UTILITY_REPLY if utility else NO_BILLS_REPLY

    # Taken from the same snapshot as the averages; ties go to the later insert
    latest = max(reversed(bills), key=lambda b: b.created_at)
    avg_units = sum(b.units_consumed for b in bills) / len(bills)
    avg_amount = sum(b.amount for b in bills) / len(bills)

    return BILL_SUMMARY_TEMPLATE.format(
        utility=f"{latest.utility_type.value} " if utility else "",
        units=_fmt_number(latest.units_consumed),
        month=latest.month.value,
        year=latest.year,
        amount=_fmt_number(latest.amount),
        avg_units=avg_units,
        avg_amount=avg_amount,
        cost_per_unit=latest.cost_per_unit,
    )


def _fixed(reply: str) -> Callable[[str, BillStore], str]:
    return lambda text, store: reply


@dataclass(frozen=True)
class AdvisorRule:
    """One keyword rule: fires when any keyword is a substring of the message."""

    intent: Intent
    keywords: tuple[str, ...]
    respond: Callable[[str, BillStore], str]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# Evaluated top to bottom; first match wins
RULES: list[AdvisorRule] = [
    AdvisorRule(Intent.GREETING, ("hi", "hello", "hey"), _fixed(GREETING_REPLY)),
    AdvisorRule(Intent.SAVING_TIPS, ("tip", "save", "reduce"), _saving_tips_reply),
    AdvisorRule(Intent.BILL_SUMMARY, ("bill", "usage"), _bill_summary_reply),
    AdvisorRule(Intent.ELECTRICITY_TIPS, ("electricity",), _fixed(ELECTRICITY_TIPS)),
    AdvisorRule(Intent.WATER_TIPS, ("water",), _fixed(WATER_TIPS)),
    AdvisorRule(Intent.GAS_TIPS, ("gas",), _fixed(GAS_TIPS)),
    AdvisorRule(Intent.THANKS, ("thank",), _fixed(THANKS_REPLY)),
]

FALLBACK_RULE = AdvisorRule(Intent.HELP, (), _fixed(HELP_REPLY))


def _match_rule(message: str) -> tuple[AdvisorRule, str]:
    if not message:
        raise EmptyMessage()
    text = message.lower()
    for rule in RULES:
        if rule.matches(text):
            return rule, text
    return FALLBACK_RULE, text


def classify(message: str) -> Intent:
    """Return the intent a message maps to, without rendering a reply."""
    rule, _ = _match_rule(message)
    return rule.intent


def classify_and_reply(message: str, store: BillStore) -> str:
    """
    Answer a free-text message.

    Args:
        message: The user's message.
        store: Bill store; only read, never modified.

    Returns:
        The reply text.

    Raises:
        EmptyMessage: If message is empty.
    """
    rule, text = _match_rule(message)
    logger.debug(f"Advisor matched {rule.intent.value} for {message[:40]!r}")
    return rule.respond(text, store)
