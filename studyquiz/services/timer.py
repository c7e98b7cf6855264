from time import perf_counter
from typing import Callable, Optional
from .builder import Response

Clock = Callable[[], int]

def monotonic_ms() -> int:
	return int(perf_counter() * 1000)

def format_clock(total_ms: int) -> str:
	seconds = max(0, total_ms) // 1000
	return f"{seconds // 60:02d}:{seconds % 60:02d}"

class TimerAccumulator:
	"""Tracks active time for the response currently on screen.

	Only ``stop`` writes to ``Response.active_time_ms``; ``live_estimate_ms``
	is a pure read used by the presentation tick.
	"""

	def __init__(self, clock: Optional[Clock] = None) -> None:
		self.clock = clock or monotonic_ms
		self._response: Optional[Response] = None
		self._origin: Optional[int] = None

	@property
	def running(self) -> bool:
		return self._origin is not None

	def begin(self, response: Response) -> None:
		self._response = response
		self._origin = self.clock()

	def stop(self) -> int:
		if self._response is None or self._origin is None:
			return 0
		delta = max(0, self.clock() - self._origin)
		self._response.active_time_ms += delta
		self._response = None
		self._origin = None
		return delta

	def discard(self) -> None:
		self._response = None
		self._origin = None

	def live_estimate_ms(self) -> int:
		if self._response is None or self._origin is None:
			return 0
		return self._response.active_time_ms + max(0, self.clock() - self._origin)
