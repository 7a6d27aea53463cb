"""Session logging utilities for shopcheck.

This module records what the reliability layer did during a run, as JSON:
- InteractionRecord for click/type operations and their attempt counts
- RecoveryRecord for element-recovery waterfalls
- SessionLogger for managing session data, screenshots and persistence
"""

import json
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass
class InteractionRecord:
    """Records one retried interaction.

    Attributes:
        timestamp: ISO format timestamp of when the interaction finished.
        action: The interaction kind (click, type).
        target: Description of the element interacted with.
        attempts: Number of attempts made.
        outcome: succeeded or failed.
    """

    timestamp: str
    action: str
    target: str
    attempts: int
    outcome: str


@dataclass
class RecoveryRecord:
    """Records an element-recovery waterfall.

    Attributes:
        timestamp: ISO format timestamp of when the recovery finished.
        description: Free-text description of the element.
        original: The locator that failed.
        candidates: Every candidate locator, in probe order.
        outcomes: Found-and-interactable flag for each probed candidate.
        chosen: The locator that succeeded, or None.
        screenshot: Filename of the diagnostic screenshot, if any.
    """

    timestamp: str
    description: str
    original: str
    candidates: list[str]
    outcomes: list[bool]
    chosen: str | None
    screenshot: str | None = None


class SessionLogger:
    """Logs session data to JSON file.

    Persists data to JSON after each operation so that a crashed run still
    leaves its diagnostics behind.

    Attributes:
        session_id: Unique identifier for this session.
        session_dir: Directory where session data is stored.
        data: Dictionary containing all session data.
    """

    def __init__(self, output_dir: Path, name: str, base_url: str) -> None:
        """Initialize a new session logger.

        Args:
            output_dir: Parent directory where the session folder will be created.
            name: Name of the run (test name or CLI command).
            base_url: Site under test.
        """
        self.session_id = f"{_slug(name)}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self.session_dir = output_dir / self.session_id
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.data: dict[str, Any] = {
            "session_id": self.session_id,
            "name": name,
            "base_url": base_url,
            "started_at": datetime.now().isoformat(),
            "completed_at": None,
            "result": None,
            "interactions": [],
            "recoveries": [],
            "dom_analyses": [],
            "screenshots": [],
            "error": None,
        }

    def log_interaction(
        self, action: str, target: str, attempts: int, outcome: str
    ) -> None:
        """Log a retried interaction.

        Args:
            action: The interaction kind (click, type).
            target: Description of the element.
            attempts: Number of attempts made.
            outcome: succeeded or failed.
        """
        record = InteractionRecord(
            timestamp=datetime.now().isoformat(),
            action=action,
            target=target,
            attempts=attempts,
            outcome=outcome,
        )
        self.data["interactions"].append(asdict(record))
        self._save()

    def log_recovery(
        self,
        description: str,
        original: str,
        candidates: list[str],
        outcomes: list[bool],
        chosen: str | None,
        screenshot: str | None = None,
    ) -> None:
        """Log an element-recovery waterfall.

        Args:
            description: Free-text description of the element.
            original: The locator that failed.
            candidates: Every candidate locator, in probe order.
            outcomes: Found-and-interactable flag for each probed candidate.
            chosen: The locator that succeeded, or None.
            screenshot: Filename of the diagnostic screenshot, if any.
        """
        record = RecoveryRecord(
            timestamp=datetime.now().isoformat(),
            description=description,
            original=original,
            candidates=candidates,
            outcomes=outcomes,
            chosen=chosen,
            screenshot=screenshot,
        )
        self.data["recoveries"].append(asdict(record))
        self._save()

    def log_dom_analysis(
        self, description: str, analysis: dict[str, list[str]]
    ) -> None:
        """Log selector suggestions gathered after a failed recovery."""
        self.data["dom_analyses"].append(
            {
                "timestamp": datetime.now().isoformat(),
                "description": description,
                "analysis": analysis,
            }
        )
        self._save()

    def save_screenshot(self, name: str, image: bytes) -> Path:
        """Write screenshot bytes into the session directory.

        Args:
            name: Base name for the file; a timestamp and .png are appended.
            image: PNG bytes.

        Returns:
            Path of the written file.
        """
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        path = self.screenshots_dir / f"{_slug(name)}_{timestamp}.png"
        path.write_bytes(image)
        self.data["screenshots"].append(path.name)
        self._save()
        return path

    def complete(self, result: str, error: str | None = None) -> None:
        """Mark session complete.

        Args:
            result: The result of the session (e.g., passed, failed).
            error: Optional error message if the session failed.
        """
        self.data["completed_at"] = datetime.now().isoformat()
        self.data["result"] = result
        self.data["error"] = error
        self._save()

    def _save(self) -> None:
        """Write session data to JSON file."""
        log_path = self.session_dir / "session.json"
        with open(log_path, "w") as f:
            json.dump(self.data, f, indent=2)

    @property
    def screenshots_dir(self) -> Path:
        """Directory for screenshots.

        Returns:
            Path to the session directory where screenshots should be stored.
        """
        return self.session_dir


def _slug(text: str) -> str:
    """Make text safe for use in a file name."""
    return re.sub(r"[^A-Za-z0-9_-]+", "_", text).strip("_") or "session"
