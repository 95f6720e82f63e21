"""Sample catalogue data for development databases."""

import logging
from dataclasses import dataclass
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError

from .service import DatabaseService

logger = logging.getLogger(__name__)

SEED_TAGS = ["경배", "찬양", "감사", "은혜", "사랑", "십자가", "부활", "평화", "소망"]


@dataclass(frozen=True)
class SeedSong:
    """A sample song. Each lyric becomes one slide after the title slide."""

    title: str
    code: str
    order: int
    lyrics: List[str]
    tags: List[str]


SEED_SONGS = [
    SeedSong(
        title="주님의 사랑",
        code="C",
        order=1,
        lyrics=[
            "주님의 사랑 나를 감싸네\n그 품 안에서 평안을 찾네",
            "세상 그 무엇과 비교할 수 없는\n영원한 사랑 주님의 사랑",
            "나의 삶 속에 함께 하시며\n나의 길 위에 빛이 되시네",
        ],
        tags=["사랑", "평화"],
    ),
    SeedSong(
        title="은혜 아니면",
        code="C",
        order=2,
        lyrics=[
            "은혜 아니면 나 설 곳 없네\n주님의 은혜 날 세우시네",
            "연약한 나를 붙드시는 손\n그 사랑으로 나 살아가네",
            "주님만이 나의 소망\n주님만이 나의 생명",
        ],
        tags=["은혜", "소망"],
    ),
    SeedSong(
        title="내 주를 가까이",
        code="C",
        order=3,
        lyrics=[
            "내 주를 가까이 하게 함은\n십자가 짐같은 고생이나",
            "내 일생 소원은 늘 찬송하면서\n주를 더 가까이 하는 것",
        ],
        tags=["십자가", "경배"],
    ),
    SeedSong(
        title="십자가 그 사랑",
        code="A",
        order=1,
        lyrics=[
            "십자가 그 사랑 내게 전해지네\n나를 위해 피 흘리신 그 사랑",
            "내 모든 죄 씻기시려\n채찍에 맞으신 주님",
            "그 사랑 앞에 나 무릎 꿇네\n감사와 찬양 드리네",
        ],
        tags=["십자가", "사랑", "감사"],
    ),
    SeedSong(
        title="나 같은 죄인 살리신",
        code="A",
        order=2,
        lyrics=[
            "나 같은 죄인 살리신\n주 은혜 놀라워",
            "잃었던 생명 찾았고\n광명을 얻었네",
            "큰 죄악에서 건지신\n주 은혜 고마워",
        ],
        tags=["은혜", "감사"],
    ),
    SeedSong(
        title="여호와는 나의 목자시니",
        code="B",
        order=1,
        lyrics=[
            "여호와는 나의 목자시니\n내게 부족함이 없으리로다",
            "그가 나를 푸른 풀밭에 누이시며\n쉴만한 물가로 인도하시는도다",
        ],
        tags=["평화", "은혜"],
    ),
    SeedSong(
        title="살아계신 주",
        code="D",
        order=1,
        lyrics=[
            "살아계신 주 살아계신 주\n무덤에서 부활하신 주",
            "살아계신 주 살아계신 주\n나와 함께 계시는 주",
            "그 이름은 예수 그 이름은 예수\n온 세상의 구원자",
        ],
        tags=["부활", "찬양"],
    ),
    SeedSong(
        title="주님께 영광",
        code="D",
        order=2,
        lyrics=[
            "주님께 영광 주님께 영광\n높은 하늘 위에 계신 주님께",
            "온 땅위의 모든 것이\n주님을 찬양하네",
            "영광 영광 할렐루야\n영원히 찬양하리",
        ],
        tags=["경배", "찬양"],
    ),
]


@dataclass
class SeedResult:
    """Counts of what seeding changed."""

    tags_created: int = 0
    songs_created: int = 0
    songs_tagged: int = 0


def seed_database(db_service: DatabaseService) -> SeedResult:
    """Populate the catalogue with sample songs and tags.

    Tags are always ensured. When the catalogue already has songs, only the
    tags of matching sample songs are attached and nothing else is created.
    """
    result = SeedResult()

    tag_ids: Dict[str, int] = {}
    for tag_name in SEED_TAGS:
        existing = db_service.get_tag_by_name(tag_name)
        if existing is None:
            existing = db_service.create_tag(tag_name)
            result.tags_created += 1
        tag_ids[tag_name] = existing.id

    if db_service.get_all_songs():
        logger.info("Catalogue already has songs, only attaching sample tags")
        for seed_song in SEED_SONGS:
            song = db_service.get_song_by_code_order(seed_song.code, seed_song.order)
            if song is None:
                continue
            for tag_name in seed_song.tags:
                db_service.add_tag_to_song(song.id, tag_ids[tag_name])
            result.songs_tagged += 1
        return result

    for seed_song in SEED_SONGS:
        slides = [(1, seed_song.title)] + [
            (index, lyric) for index, lyric in enumerate(seed_song.lyrics, start=2)
        ]
        try:
            db_service.create_song_with_content(
                seed_song.title,
                seed_song.code,
                seed_song.order,
                slides,
                seed_song.tags,
            )
            result.songs_created += 1
        except SQLAlchemyError as e:
            logger.error("Failed to seed song %s: %s", seed_song.title, e)

    logger.info(
        "Seeded %d songs and %d tags", result.songs_created, result.tags_created
    )
    return result


def clear_database(db_service: DatabaseService) -> int:
    """Delete every song (slides and tag links go with them).

    Returns:
        Number of songs deleted
    """
    songs = db_service.get_all_songs()
    for song in songs:
        db_service.delete_song(song.id)
    logger.info("Deleted %d songs", len(songs))
    return len(songs)
