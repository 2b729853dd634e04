"""Per-player censored snapshots of a room.

A player sees their own number and the numbers that have been revealed,
never anyone else's hidden number.
"""

from typing import Any, Dict, Iterator, Tuple

from .reveal import disclosed


def revealed_cards(room) -> Dict[int, Dict[str, Any]]:
    return {
        step.index: {
            'player_id': step.player_id,
            'number': step.number,
            'is_correct': step.is_correct,
        }
        for step in disclosed(room)
    }


def project(room, player_id) -> Dict[str, Any]:
    with room.lock:
        me = room.player(player_id)
        return {
            'code': room.code,
            'version': room.version,
            'host_id': room.host_id,
            'status': room.status,
            'players': [p.to_dict() for p in room.players],
            'my_number': me.number if me else None,
            'card_line': room.card_line.to_list(),
            'reveal_index': room.reveal_index,
            'category': room.category,
            'result': room.result,
            'revealed_cards': revealed_cards(room),
        }


def project_all(room) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """One (player_id, snapshot) pair per seated player."""
    with room.lock:
        snapshots = [(p.id, project(room, p.id)) for p in room.players]
    return iter(snapshots)


def round_summary(room) -> Dict[str, Any]:
    """Payload of the ``round_ended`` event."""
    with room.lock:
        return {
            'result': room.result,
            'final_order': room.final_order(),
            'category': room.category,
        }
