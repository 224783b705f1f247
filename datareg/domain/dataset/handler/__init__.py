"""Dataset domain event handlers."""

from datareg.domain.dataset.handler.forward_notification import ForwardRegistryNotifications

__all__ = ["ForwardRegistryNotifications"]
