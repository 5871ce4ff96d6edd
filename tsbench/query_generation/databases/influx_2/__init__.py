from tsbench.query_generation.databases.influx_2.base import BaseGenerator
from tsbench.query_generation.databases.influx_2.devops import Devops, new_devops
from tsbench.query_generation.databases.influx_2.iot import IoT, new_iot

__all__ = ["BaseGenerator", "Devops", "IoT", "new_devops", "new_iot"]
