from abc import ABC, abstractmethod
from typing import List

from feedmill.utils.time_utils import Deadline


class BaseSource(ABC):
    @abstractmethod
    def fetch(self, deadline: Deadline) -> List:
        pass
