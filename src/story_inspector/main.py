"""Command-line demo: track a small story state through two turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from story_inspector.config import load_config
from story_inspector.diff.DiffRecord import DiffRecord
from story_inspector.observability.logging import setup_logging
from story_inspector.tracker.DiffTracker import DiffTracker


@dataclass
class Player:
    name: str
    health: int = 10
    inventory: list[str] = field(default_factory=list)


def _demo_state() -> dict[str, Any]:
    player = Player(name="Wren", inventory=["lantern", "rope"])
    rooms: dict[str, Any] = {"cellar": {"lit": False}, "hall": {"lit": True}}
    return {
        "player": player,
        "rooms": rooms,
        "turn": 1,
        "flags": {"met_keeper": False},
        "on_enter": lambda: None,  # callables are never inspected
    }


def _advance(state: dict[str, Any]) -> None:
    state["turn"] += 1
    state["player"].health -= 3
    state["player"].inventory.remove("rope")
    state["player"].inventory.append("key")
    state["rooms"]["cellar"]["lit"] = True
    state["flags"]["met_keeper"] = True
    state["flags"]["door code"] = "4471"


def _print_diffs(diffs: list[DiffRecord], _: Any) -> None:
    for record in diffs:
        print(f"  {record}")


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, json=False)
    print("story inspector running!")

    state = _demo_state()
    tracker = DiffTracker.from_config(lambda: state, config)
    tracker.subscribe(_print_diffs)

    tracker.check()
    _advance(state)
    print("turn 1 -> 2:")
    result = tracker.check()
    if result.failed:
        print(f"  check failed: {result.error}")
    elif not result.changed:
        print("  no differences")


if __name__ == "__main__":
    main()
