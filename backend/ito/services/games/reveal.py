"""Step-wise disclosure of the card line.

The same ordering rule is used for the live reveal and for replaying what
has already been disclosed, so the per-player views can never disagree
with the authoritative result.
"""

from dataclasses import asdict, dataclass
from typing import List, Optional

from ito.constants import ENDED, LOSE, WIN


@dataclass(frozen=True)
class RevealStep:
    index: int
    player_id: str
    player_name: str
    number: int
    is_correct: bool
    # 'win' / 'lose' when this step settled the round, else None
    outcome: Optional[str] = None

    def to_dict(self):
        data = asdict(self)
        data.pop('outcome')
        return data


def in_order(previous: Optional[int], current: int) -> bool:
    """A card is correct when it is not lower than its predecessor.

    The first card has no predecessor and is always correct.
    """
    if previous is None:
        return True
    return current >= previous


def _number_at(room, index: int):
    player = room.player(room.card_line[index])
    return player, player.number


def judge(room, index: int) -> RevealStep:
    """Evaluate position ``index`` of the card line without mutating anything."""
    player, number = _number_at(room, index)
    previous = _number_at(room, index - 1)[1] if index > 0 else None
    return RevealStep(
        index=index,
        player_id=player.id,
        player_name=player.name,
        number=number,
        is_correct=in_order(previous, number),
    )


def reveal_step(room) -> RevealStep:
    """Disclose ``card_line[reveal_index]`` and settle the round if it is over.

    Caller holds ``room.lock`` and has checked status and bounds.
    """
    step = judge(room, room.reveal_index)
    room.reveal_index += 1
    outcome = None
    if not step.is_correct:
        outcome = LOSE
    elif room.reveal_index == len(room.card_line):
        outcome = WIN
    if outcome is not None:
        room.status = ENDED
        room.result = outcome
        step = RevealStep(**{**asdict(step), 'outcome': outcome})
    return step


def disclosed(room) -> List[RevealStep]:
    """Replay positions ``0..reveal_index-1`` with the live rule."""
    return [judge(room, i) for i in range(min(room.reveal_index, len(room.card_line)))]
