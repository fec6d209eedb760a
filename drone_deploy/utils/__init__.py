from .events import DEPLOY_EVENTS, EventEmitter

__all__ = ["DEPLOY_EVENTS", "EventEmitter"]
