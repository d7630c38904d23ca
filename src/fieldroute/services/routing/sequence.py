"""Visit ordering for a single rep's day.

The greedy pass always takes the nearest unvisited store. Priority only
decides between candidates whose distances fall within ``epsilon_km`` of the
nearest one, so an overdue store two kilometres away does not jump ahead of a
due-today store next door. Minimising travel is the primary objective and
priority is deliberately a tie-break only.
"""

from __future__ import annotations

from typing import Sequence

from ..geospatial import build_distance_matrix
from .models import OrderedStop, RouteCandidate


def _points(start: tuple[float, float], candidates: Sequence[RouteCandidate]) -> list[tuple[float, float]]:
    return [start] + [(c.store.latitude, c.store.longitude) for c in candidates]


def nearest_neighbor_order(
    matrix: Sequence[Sequence[float]],
    candidates: Sequence[RouteCandidate],
    *,
    epsilon_km: float,
) -> list[int]:
    """Greedy tour over matrix nodes ``1..n`` starting from node 0.

    Returns candidate indices (0-based) in visiting order.
    """

    remaining = set(range(1, len(matrix)))
    current = 0
    tour: list[int] = []
    while remaining:
        nearest = min(matrix[current][node] for node in remaining)
        tied = [node for node in remaining if matrix[current][node] <= nearest + epsilon_km]
        chosen = min(
            tied,
            key=lambda node: (
                candidates[node - 1].rank,
                matrix[current][node],
                candidates[node - 1].store.id,
            ),
        )
        tour.append(chosen - 1)
        remaining.remove(chosen)
        current = chosen
    return tour


def path_distance(matrix: Sequence[Sequence[float]], tour: Sequence[int]) -> float:
    """Length of the open path start -> tour[0] -> ... (tour holds candidate indices)."""

    total = 0.0
    previous = 0
    for index in tour:
        total += matrix[previous][index + 1]
        previous = index + 1
    return total


def two_opt(matrix: Sequence[Sequence[float]], tour: Sequence[int], *, max_iterations: int = 200) -> list[int]:
    """Reverse segments while that shortens the open path; the start stays fixed."""

    best = list(tour)
    best_distance = path_distance(matrix, best)
    improved = True
    iterations = 0
    while improved and iterations < max_iterations:
        improved = False
        iterations += 1
        for i in range(len(best) - 1):
            for j in range(i + 1, len(best)):
                candidate = best[:i] + best[i : j + 1][::-1] + best[j + 1 :]
                distance = path_distance(matrix, candidate)
                if distance < best_distance - 1e-9:
                    best = candidate
                    best_distance = distance
                    improved = True
    return best


def order_candidates(
    start: tuple[float, float],
    candidates: Sequence[RouteCandidate],
    *,
    epsilon_km: float,
    refine: bool = False,
    max_iterations: int = 200,
) -> list[OrderedStop]:
    """Order candidates for visiting and attach each leg's distance."""

    if not candidates:
        return []
    matrix = build_distance_matrix(_points(start, candidates))
    tour = nearest_neighbor_order(matrix, candidates, epsilon_km=epsilon_km)
    if refine and len(tour) > 2:
        tour = two_opt(matrix, tour, max_iterations=max_iterations)

    stops: list[OrderedStop] = []
    previous = 0
    for index in tour:
        stops.append(OrderedStop(candidate=candidates[index], distance_from_prev_km=matrix[previous][index + 1]))
        previous = index + 1
    return stops
