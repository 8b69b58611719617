from .fake_client import ScriptedHeadClient
from .metric_delta import histogram_observes, metric_delta

__all__ = ["ScriptedHeadClient", "histogram_observes", "metric_delta"]
