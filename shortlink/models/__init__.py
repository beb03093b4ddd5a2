from shortlink.models.link_model import LinkModel, LinkView, LinkPatch, LinkState, link_state, to_iso, from_iso


__all__ = [
    'LinkModel',
    'LinkView',
    'LinkPatch',
    'LinkState',
    'link_state',
    'to_iso',
    'from_iso',
]
