"""
Repository Pattern - data access layer for cards, tags and review statistics.

SQLite holds the structured data; CSV files (via pandas) are the interchange
format for bulk import and export.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional

import pandas as pd

from ..config import Config, Language
from ..errors import StorageError
from ..models import Card, CardPerformance, Tag
from ..utils.parsing import TextParser

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Front", "Back", "FrontLanguage", "BackLanguage", "Notes", "Tags", "Favorite", "Timestamp"
]


class BaseRepository(ABC):
    """
    Abstract base class for card repositories.

    Defines the contract for all data access operations.
    """

    @abstractmethod
    def load(self) -> bool:
        """Prepare storage. Returns True if successful."""
        pass

    @abstractmethod
    def get_all_cards(self) -> List[Card]:
        """Get all cards, oldest first."""
        pass

    @abstractmethod
    def get_card(self, card_id: str) -> Optional[Card]:
        """Get a card by id."""
        pass

    @abstractmethod
    def add_card(self, card: Card) -> Card:
        """Insert a card together with its tag links."""
        pass

    @abstractmethod
    def update_card(self, card: Card) -> bool:
        """Overwrite a stored card."""
        pass

    @abstractmethod
    def delete_card(self, card_id: str) -> bool:
        """Delete a card by id."""
        pass

    @abstractmethod
    def delete_all_cards(self) -> int:
        """Delete every card. Returns the number removed."""
        pass

    @abstractmethod
    def get_all_tags(self) -> List[Tag]:
        """Get all tags sorted by name."""
        pass

    @abstractmethod
    def find_or_create_tag(self, name: str) -> Tag:
        """Return the tag with this name, creating it if needed."""
        pass

    @abstractmethod
    def delete_tag(self, name: str) -> bool:
        """Delete a tag and its card links."""
        pass

    @abstractmethod
    def get_unused_tags(self) -> List[Tag]:
        """Tags no card refers to."""
        pass


class SQLiteRepository(BaseRepository):
    """
    SQLite-based repository implementation.

    Provides:
    - Transactional updates
    - Many-to-many card/tag links
    - Per-card review statistics
    """

    # Schema version for migrations
    SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize SQLite repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path or Config.DB_FILE)
        self._ensure_db_dir()

    def _ensure_db_dir(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Database error on %s: %s", self.db_path, e)
            raise StorageError("Database operation failed", details=str(e)) from e
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS cards (
                    id TEXT PRIMARY KEY,
                    front_text TEXT NOT NULL,
                    back_text TEXT NOT NULL,
                    front_language TEXT NOT NULL,
                    back_language TEXT NOT NULL,
                    notes TEXT DEFAULT '',
                    is_favorite INTEGER DEFAULT 0,
                    timestamp TEXT NOT NULL,
                    audio_path TEXT,
                    image_path TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    id TEXT PRIMARY KEY,
                    name TEXT UNIQUE NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS card_tags (
                    card_id TEXT REFERENCES cards(id) ON DELETE CASCADE,
                    tag_id TEXT REFERENCES tags(id) ON DELETE CASCADE,
                    position INTEGER DEFAULT 0,
                    PRIMARY KEY (card_id, tag_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS card_performance (
                    card_id TEXT PRIMARY KEY REFERENCES cards(id) ON DELETE CASCADE,
                    total_reviews INTEGER DEFAULT 0,
                    correct_reviews INTEGER DEFAULT 0,
                    incorrect_reviews INTEGER DEFAULT 0,
                    consecutive_correct INTEGER DEFAULT 0,
                    consecutive_incorrect INTEGER DEFAULT 0,
                    time_spent REAL DEFAULT 0,
                    average_response_time REAL DEFAULT 0,
                    difficulty_level INTEGER DEFAULT 3,
                    mastery_level INTEGER DEFAULT 0,
                    last_reviewed TEXT,
                    next_review_date TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            # Indexes for common queries
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_cards_timestamp ON cards(timestamp)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_card_tags_tag ON card_tags(tag_id)")

            cursor.execute("INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, ?)",
                           (self.SCHEMA_VERSION, datetime.now().isoformat()))

            conn.commit()

    def load(self) -> bool:
        """Initialize database and schema."""
        try:
            self._init_schema()
            return True
        except StorageError:
            return False

    # ==================== Cards ====================

    def get_all_cards(self) -> List[Card]:
        """Get all cards ordered by creation time."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM cards ORDER BY timestamp, rowid").fetchall()
            tags = self._tags_by_card(conn)
        return [self._row_to_card(row, tags.get(row["id"], [])) for row in rows]

    def get_card(self, card_id: str) -> Optional[Card]:
        """Get card by id."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM cards WHERE id = ?", (card_id,)).fetchone()
            if row is None:
                return None
            tags = self._tags_by_card(conn, card_id)
        return self._row_to_card(row, tags.get(card_id, []))

    def add_card(self, card: Card) -> Card:
        """Insert a new card."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO cards
                (id, front_text, back_text, front_language, back_language, notes,
                 is_favorite, timestamp, audio_path, image_path)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._card_values(card),
            )
            self._write_tag_links(conn, card.id, card.tags)
            conn.commit()
        logger.debug("Stored card %s", card.id)
        return card

    def update_card(self, card: Card) -> bool:
        """Update every column of an existing card."""
        with self._get_connection() as conn:
            values = self._card_values(card)
            cursor = conn.execute(
                """
                UPDATE cards SET front_text = ?, back_text = ?, front_language = ?,
                    back_language = ?, notes = ?, is_favorite = ?, timestamp = ?,
                    audio_path = ?, image_path = ?
                WHERE id = ?
                """,
                values[1:] + (card.id,),
            )
            if cursor.rowcount == 0:
                return False
            conn.execute("DELETE FROM card_tags WHERE card_id = ?", (card.id,))
            self._write_tag_links(conn, card.id, card.tags)
            conn.commit()
            return True

    def delete_card(self, card_id: str) -> bool:
        """Delete card by id."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
            conn.commit()
            return cursor.rowcount > 0

    def delete_all_cards(self) -> int:
        """Delete all cards; tags are kept."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM cards")
            conn.commit()
            return cursor.rowcount

    def count(self) -> int:
        """Get total card count."""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM cards").fetchone()[0]

    # ==================== Tags ====================

    def get_all_tags(self) -> List[Tag]:
        """Get all tags sorted by name."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT id, name FROM tags ORDER BY name").fetchall()
        return [Tag(name=row["name"], id=row["id"]) for row in rows]

    def find_or_create_tag(self, name: str) -> Tag:
        """Find tag by name or create it."""
        with self._get_connection() as conn:
            tag = self._find_or_create_tag(conn, name)
            conn.commit()
        return tag

    def delete_tag(self, name: str) -> bool:
        """Delete tag by name; card links go with it."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM tags WHERE name = ?", (name,))
            conn.commit()
            return cursor.rowcount > 0

    def get_unused_tags(self) -> List[Tag]:
        """Tags that no card links to."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT id, name FROM tags
                WHERE id NOT IN (SELECT DISTINCT tag_id FROM card_tags)
                ORDER BY name
                """
            ).fetchall()
        return [Tag(name=row["name"], id=row["id"]) for row in rows]

    # ==================== Review statistics ====================

    def get_performance(self, card_id: str) -> Optional[CardPerformance]:
        """Get review statistics for one card."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM card_performance WHERE card_id = ?", (card_id,)
            ).fetchone()
        return self._row_to_performance(row) if row else None

    def get_all_performances(self) -> Dict[str, CardPerformance]:
        """Get review statistics of every reviewed card keyed by card id."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM card_performance").fetchall()
        return {row["card_id"]: self._row_to_performance(row) for row in rows}

    def save_performance(self, perf: CardPerformance) -> None:
        """Insert or replace review statistics."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO card_performance
                (card_id, total_reviews, correct_reviews, incorrect_reviews,
                 consecutive_correct, consecutive_incorrect, time_spent,
                 average_response_time, difficulty_level, mastery_level,
                 last_reviewed, next_review_date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    perf.card_id, perf.total_reviews, perf.correct_reviews,
                    perf.incorrect_reviews, perf.consecutive_correct,
                    perf.consecutive_incorrect, perf.time_spent,
                    perf.average_response_time, perf.difficulty_level,
                    perf.mastery_level, _iso(perf.last_reviewed),
                    _iso(perf.next_review_date), perf.created_at.isoformat(),
                ),
            )
            conn.commit()

    # ==================== CSV interchange ====================

    def export_to_csv(self, csv_path: str) -> int:
        """
        Export all cards to a pipe-separated CSV file.

        Args:
            csv_path: Destination file

        Returns:
            Number of cards written
        """
        cards = self.get_all_cards()
        df = pd.DataFrame(
            [
                {
                    "Front": card.front_text,
                    "Back": card.back_text,
                    "FrontLanguage": card.front_language.code,
                    "BackLanguage": card.back_language.code,
                    "Notes": card.notes,
                    "Tags": " ".join(card.tags),
                    "Favorite": int(card.is_favorite),
                    "Timestamp": card.timestamp.isoformat(),
                }
                for card in cards
            ],
            columns=CSV_COLUMNS,
        )
        Path(csv_path).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(csv_path, sep='|', index=False, encoding='utf-8-sig')
        return len(df)

    @staticmethod
    def read_csv(csv_path: str) -> List[Card]:
        """
        Parse cards from a pipe-separated CSV file without storing them.

        Rows with empty front or back text are skipped. Missing language
        columns fall back to Spanish front / English back.

        Args:
            csv_path: Source file

        Returns:
            Parsed (unsaved) cards
        """
        path = Path(csv_path)
        if not path.exists():
            raise StorageError(f"CSV file not found: {csv_path}")

        try:
            df = pd.read_csv(
                path,
                sep='|',
                encoding='utf-8-sig',
                dtype=str,
                keep_default_na=False,
                on_bad_lines='warn',
                engine='python',
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read CSV file: {csv_path}", details=str(e)) from e

        df.columns = df.columns.str.strip()
        cards = []
        for _, row in df.iterrows():
            front = TextParser.clean_field(row.get("Front", ""))
            back = TextParser.clean_field(row.get("Back", ""))
            if not front or not back:
                continue
            card = Card(
                front_text=front,
                back_text=back,
                front_language=Language.from_code(row.get("FrontLanguage")) or Language.SPANISH,
                back_language=Language.from_code(row.get("BackLanguage")) or Language.ENGLISH,
                notes=TextParser.clean_field(row.get("Notes", "")),
                tags=TextParser.split_tags(row.get("Tags", "")),
                is_favorite=str(row.get("Favorite", "")).strip().lower() in ("1", "true", "yes"),
            )
            timestamp = _parse_dt(row.get("Timestamp"))
            if timestamp is not None:
                card.timestamp = timestamp
            cards.append(card)
        return cards

    # ==================== Row mapping helpers ====================

    def _find_or_create_tag(self, conn: sqlite3.Connection, name: str) -> Tag:
        row = conn.execute("SELECT id, name FROM tags WHERE name = ?", (name,)).fetchone()
        if row:
            return Tag(name=row["name"], id=row["id"])
        tag = Tag(name=name)
        conn.execute("INSERT INTO tags (id, name) VALUES (?, ?)", (tag.id, tag.name))
        return tag

    def _write_tag_links(self, conn: sqlite3.Connection, card_id: str, names: Iterable[str]) -> None:
        for position, name in enumerate(names):
            tag = self._find_or_create_tag(conn, name)
            conn.execute(
                "INSERT OR IGNORE INTO card_tags (card_id, tag_id, position) VALUES (?, ?, ?)",
                (card_id, tag.id, position),
            )

    @staticmethod
    def _tags_by_card(conn: sqlite3.Connection, card_id: Optional[str] = None) -> Dict[str, List[str]]:
        query = """
            SELECT ct.card_id, t.name FROM card_tags ct
            JOIN tags t ON t.id = ct.tag_id
        """
        params: tuple = ()
        if card_id is not None:
            query += " WHERE ct.card_id = ?"
            params = (card_id,)
        query += " ORDER BY ct.card_id, ct.position"

        result: Dict[str, List[str]] = {}
        for row in conn.execute(query, params).fetchall():
            result.setdefault(row["card_id"], []).append(row["name"])
        return result

    @staticmethod
    def _card_values(card: Card) -> tuple:
        return (
            card.id,
            card.front_text,
            card.back_text,
            card.front_language.code,
            card.back_language.code,
            card.notes or "",
            1 if card.is_favorite else 0,
            card.timestamp.isoformat(),
            card.audio_path,
            card.image_path,
        )

    @staticmethod
    def _row_to_card(row: sqlite3.Row, tags: List[str]) -> Card:
        return Card(
            id=row["id"],
            front_text=row["front_text"],
            back_text=row["back_text"],
            front_language=Language.from_code(row["front_language"]) or Language.SPANISH,
            back_language=Language.from_code(row["back_language"]) or Language.ENGLISH,
            notes=row["notes"] or "",
            tags=list(tags),
            is_favorite=bool(row["is_favorite"]),
            timestamp=_parse_dt(row["timestamp"]) or datetime.now(),
            audio_path=row["audio_path"],
            image_path=row["image_path"],
        )

    @staticmethod
    def _row_to_performance(row: sqlite3.Row) -> CardPerformance:
        return CardPerformance(
            card_id=row["card_id"],
            total_reviews=row["total_reviews"],
            correct_reviews=row["correct_reviews"],
            incorrect_reviews=row["incorrect_reviews"],
            consecutive_correct=row["consecutive_correct"],
            consecutive_incorrect=row["consecutive_incorrect"],
            time_spent=row["time_spent"],
            average_response_time=row["average_response_time"],
            difficulty_level=row["difficulty_level"],
            mastery_level=row["mastery_level"],
            last_reviewed=_parse_dt(row["last_reviewed"]),
            next_review_date=_parse_dt(row["next_review_date"]),
            created_at=_parse_dt(row["created_at"]) or datetime.now(),
        )


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None
