"""Subscription registry mapping event types to consumer groups.

Built from the HANDLERS list at startup, this registry tells the Outbox
how many delivery rows to create for each event type.
"""

from typing import NewType

SubscriptionRegistry = NewType("SubscriptionRegistry", dict[str, set[str]])
"""Mapping of event_type_name → set of consumer_group_names.

Every name in a handler's ``__event_types__`` maps to the handler's ``__name__``,
so a dataset notification gets one delivery row per forwarding handler.
"""
