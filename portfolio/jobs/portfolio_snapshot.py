"""
Portfolio snapshot report.

Runs one activation per username against the configured profile-data
service, prints a short summary of the projected page and saves the
display model as JSON for inspection.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from portfolio.github.contracts import FetchState, FetchStatus
from portfolio.orchestrator import PortfolioFetchOrchestrator
from portfolio.services.presentation import DisplayModel, project

logger = logging.getLogger(__name__)


class PortfolioSnapshotReport:
    """Fetches, projects and stores display models for a set of usernames."""

    def __init__(
        self,
        orchestrator: PortfolioFetchOrchestrator,
        output_dir: Optional[str] = None,
    ):
        self.orchestrator = orchestrator
        self.output_dir = output_dir
        self.timestamp = datetime.utcnow()

    async def run(self, usernames: Sequence[str]) -> Dict[str, Any]:
        """
        Execute one activation per username.

        Returns:
            Dict with per-username status and overall success flag
        """
        results: List[Dict[str, Any]] = []
        for username in usernames:
            snapshots = [snapshot async for snapshot in self.orchestrator.observe(username)]
            terminal = snapshots[-1]
            model = project(terminal)

            self._print_summary(username, terminal, model)
            saved_to = self._save(username, terminal, model) if self.output_dir else None

            results.append({
                "username": username,
                "status": terminal.status.value,
                "snapshots": [snapshot.status.value for snapshot in snapshots],
                "error": terminal.error_message,
                "repositories": len(model.repositories),
                "saved_to": saved_to,
            })

        return {
            "timestamp": self.timestamp.isoformat(),
            "base_url": self.orchestrator.config.base_url,
            "success": all(r["status"] == FetchStatus.SUCCESS.value for r in results),
            "results": results,
        }

    def _save(self, username: str, state: FetchState, model: DisplayModel) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        data = {
            "username": username,
            "fetched_at": self.timestamp.isoformat(),
            "status": state.status.value,
            "display_model": asdict(model),
        }

        filepath = os.path.join(self.output_dir, f"{username}.json")
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info(f"Saved display model for {username} to {filepath}")
        return filepath

    def _print_summary(self, username: str, state: FetchState, model: DisplayModel) -> None:
        print(f"\n{'='*60}")
        print(f"  {username} — {state.status.value.upper()}")
        print(f"{'='*60}")
        if state.is_error:
            print(f"  Error:        {model.error_message}")
        print(f"  Name:         {model.headline}")
        print(f"  Location:     {model.location}")
        print(f"  Followers:    {model.followers}")
        print(f"  Following:    {model.following}")
        print(f"  Public repos: {model.public_repos}")

        if model.repositories:
            print(f"\n  Projects:")
            for card in model.repositories:
                live = " [live]" if card.has_live_demo else ""
                topics = f" ({', '.join(card.topics)})" if card.topics else ""
                print(f"    - {card.name} ★{card.stars}{live}{topics}")
        print()
