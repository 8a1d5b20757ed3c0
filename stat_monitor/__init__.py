"""Host metrics sampler that broadcasts values worth reporting."""

__version__ = '1.0.0'
