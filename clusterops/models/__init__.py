from .clusters import ClusterModel as ClusterModel
from .traces import TraceModel as TraceModel
from .executions import CommandExecutionModel as CommandExecutionModel
from . import summary  # noqa: F401  registers the view DDL hooks
