"""
ComplaintDesk CLI Session Storage
=================================

The CLI keeps exactly one session: the token returned by signup/login and
the account it belongs to. It lives in ``~/.complaintdesk/credentials.json``
(mode 600) and is dropped on logout or as soon as the API answers 401.
"""

import os
import json
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict, field

from rich.console import Console


@dataclass
class StoredSession:
    """Stored session token and the account it was issued for"""
    token: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str:
        return self.user.get("email", "")

    @property
    def role(self) -> str:
        return self.user.get("role", "user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionStore:
    """Persists the CLI session between invocations"""

    def __init__(self, path: Path, console: Optional[Console] = None):
        self.path = Path(path)
        self.console = console or Console(stderr=True)
        self.session: Optional[StoredSession] = None
        self._load()

    def _load(self) -> bool:
        """Load the session from file"""
        if not self.path.exists():
            return False
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            self.session = StoredSession(token=data["token"], user=data.get("user") or {})
            return True
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.console.print(f"[yellow]Warning: Could not load session, please log in again: {e}[/yellow]")
            self.session = None
            return False

    def save(self, token: str, user: Dict[str, Any]) -> StoredSession:
        """Store a new session, replacing any previous one"""
        self.session = StoredSession(token=token, user=user)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(asdict(self.session), f, indent=2)
        # Secure the file (no-op on platforms without POSIX modes)
        if os.name == "posix":
            os.chmod(self.path, 0o600)
        return self.session

    def clear(self) -> None:
        """Forget the session"""
        self.session = None
        if self.path.exists():
            self.path.unlink()

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and bool(self.session.token)

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for API requests"""
        if self.is_authenticated:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}
