# sirs_ode/integrate/trajectory.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Sequence, Tuple
import numpy as np
import pandas as pd

Array = np.ndarray


class Sample(NamedTuple):
    """One row of an SIRS trajectory."""
    t: float
    S: float
    I: float
    R: float


@dataclass
class IntegrationStats:
    n_eval: int = 0            # right-hand-side evaluations
    accepted_steps: int = 0
    rejected_steps: int = 0


@dataclass
class Trajectory:
    """
    Time series produced by the integrator.

    ``t`` has shape (n_times,) and ``y`` has shape (n_states, n_times),
    the same layout ``scipy.integrate.solve_ivp`` uses.
    """
    t: Array                                  # type: ignore
    y: Array                                  # type: ignore
    labels: Tuple[str, ...] = ("S", "I", "R")
    stats: IntegrationStats = field(default_factory=IntegrationStats)

    def __len__(self) -> int:
        return len(self.t)

    @property
    def final_state(self) -> Array:
        return self.y[:, -1]

    def state(self, label: str) -> Array:
        return self.y[self.labels.index(label)]

    def samples(self) -> Iterator[Sample]:
        for k in range(len(self.t)):
            yield Sample(float(self.t[k]), *(float(v) for v in self.y[:, k]))

    def to_list(self) -> List[List[float]]:
        """Rows of ``[t, S, I, R]``."""
        return np.vstack([self.t, self.y]).T.tolist()

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.y.T, columns=list(self.labels))
        df.insert(0, "t", self.t)
        return df


class TrajectoryBuilder:
    """Accumulates accepted samples; owned by a single integration call."""

    def __init__(self, labels: Sequence[str], stats: IntegrationStats):
        self.labels = tuple(labels)
        self.stats = stats
        self._t: List[float] = []
        self._y: List[Array] = []

    def append(self, t: float, y: Array):
        self._t.append(float(t))
        self._y.append(np.array(y, dtype=float, copy=True))

    def build(self) -> Trajectory:
        t_arr = np.array(self._t, dtype=float)
        if self._y:
            y_arr = np.vstack(self._y).T
        else:
            y_arr = np.empty((len(self.labels), 0), dtype=float)
        return Trajectory(t=t_arr, y=y_arr, labels=self.labels, stats=self.stats)


def peak_infected(trajectory: Trajectory, label: str = "I") -> Tuple[float, float]:
    """Return ``(t_peak, I_peak)`` for the infected compartment."""
    series = trajectory.state(label)
    k = int(np.argmax(series))
    return float(trajectory.t[k]), float(series[k])
