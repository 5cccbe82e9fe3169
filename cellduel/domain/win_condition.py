from typing import Optional

from cellduel.domain.duel_rules import DISCONNECT_THRESHOLD_MS, PLAYER1, PLAYER2


def evaluate_winner(
    timer1: float,
    timer2: float,
    cells1: int,
    cells2: int,
    last_seen1: Optional[int],
    last_seen2: Optional[int],
    now: int,
) -> Optional[int]:
    """Decide the winning slot (PLAYER1 or PLAYER2), or None if the duel goes on.

    Timers are checked first: both expired -> more cells wins, player1 on ties;
    one expired -> the other player wins. A stale presence then overrides any
    timer result. Player1's presence is checked before player2's, so when both
    are stale player2 wins. Presence is ignored if either record is missing.
    """
    winner = None
    if timer1 <= 0 and timer2 <= 0:
        winner = PLAYER1 if cells1 >= cells2 else PLAYER2
    elif timer1 <= 0:
        winner = PLAYER2
    elif timer2 <= 0:
        winner = PLAYER1

    if last_seen1 is not None and last_seen2 is not None:
        if now - last_seen1 > DISCONNECT_THRESHOLD_MS:
            winner = PLAYER2
        elif now - last_seen2 > DISCONNECT_THRESHOLD_MS:
            winner = PLAYER1
    return winner
