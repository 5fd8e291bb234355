"""
竞赛排名（1224 规则）

    按得分降序稳定排序
    rank[0] = 1
    rank[i] = rank[i-1]   若 points[i] == points[i-1]
            = i + 1       否则

[90, 90, 80, 70, 70, 70] → [1, 1, 3, 4, 4, 4]

过滤只作用于已排好名次的列表，不重新编号
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Sequence, TypeVar

from apps.common.utils.helpers import matches_search

T = TypeVar("T")


@dataclass(frozen=True)
class Ranked(Generic[T]):
    item: T
    points: int
    rank: int


def rank_items(items: Iterable[T], points_of: Callable[[T], int | None]) -> list[Ranked[T]]:
    """未评分（points 为 None）的条目不参与排名"""
    scored = [(item, points_of(item)) for item in items]
    scored = [(item, points) for item, points in scored if points is not None]
    scored.sort(key=lambda pair: pair[1], reverse=True)

    ranked: list[Ranked[T]] = []
    for index, (item, points) in enumerate(scored):
        if index and points == ranked[-1].points:
            rank = ranked[-1].rank
        else:
            rank = index + 1
        ranked.append(Ranked(item=item, points=points, rank=rank))
    return ranked


def competition_ranks(points: Sequence[int]) -> list[int]:
    """只针对分数序列求名次，返回按分数降序排列后的名次"""
    return [entry.rank for entry in rank_items(points, lambda value: value)]


def filter_ranked(
        ranked: Iterable[Ranked[T]],
        term: str | None,
        fields_of: Callable[[T], Iterable[str | None]],
) -> list[Ranked[T]]:
    return [entry for entry in ranked if matches_search(term, fields_of(entry.item))]
