from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

from .entities import PlayOptions, RecommendationSeeds, SearchOptions, TopItemsOptions
from .errors import ValidationError


DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0
MAX_SEARCH_LIMIT = 50
MAX_RECOMMENDATION_SEEDS = 5

TRACK_URI_PREFIX = "spotify:track:"


def normalize_page(
    options: Optional[Union[SearchOptions, TopItemsOptions]],
    max_limit: Optional[int] = None,
) -> Tuple[int, int]:
    """Resolve (limit, offset) with defaults. Limits above ``max_limit`` are capped.

    Negative values are handed to the provider unchanged.
    """
    limit = DEFAULT_LIMIT
    offset = DEFAULT_OFFSET
    if options is not None:
        if options.limit is not None:
            limit = options.limit
        if options.offset is not None:
            offset = options.offset
    if max_limit is not None and limit > max_limit:
        limit = max_limit
    return limit, offset


def to_track_uri(track_id: str) -> str:
    return f"{TRACK_URI_PREFIX}{track_id}"


def to_track_uris(track_ids: Sequence[str]) -> list[str]:
    return [to_track_uri(track_id) for track_id in track_ids]


def ensure_batch_size(method: str, ids: Sequence[str], maximum: int) -> None:
    if len(ids) > maximum:
        raise ValidationError(
            f"{method} accepts maximum {maximum} IDs, received {len(ids)}"
        )


def ensure_volume_percent(percent: int) -> None:
    if percent < 0 or percent > 100:
        raise ValidationError(f"Volume percent must be between 0 and 100, received {percent}")


def ensure_single_play_target(options: PlayOptions) -> None:
    if options.track_ids is not None and options.context_uri is not None:
        raise ValidationError("Cannot specify both track_ids and context_uri")


def count_seeds(seeds: RecommendationSeeds) -> int:
    return len(seeds.track_ids or []) + len(seeds.artist_ids or []) + len(seeds.genres or [])


def ensure_seed_count(seeds: RecommendationSeeds) -> None:
    total = count_seeds(seeds)
    if total > MAX_RECOMMENDATION_SEEDS:
        raise ValidationError(
            f"Recommendations accept maximum {MAX_RECOMMENDATION_SEEDS} seed values "
            f"across tracks, artists and genres, received {total}"
        )
