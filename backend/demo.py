"""Create demo data for development/testing."""

from backend import sessions, storage

DEMO_ADVENTURE = "midnight-express"
DEMO_TEAM = ["Ada", "Basil", "Clara", "Dmitri"]

# puzzle id → answer, for the first scenes of the preset
DEMO_ANSWERS = {
    "puzzle-1-manifest": "3A",
    "puzzle-2-morse": "DINING CAR WINDOW",
}


def create_demo_data() -> str:
    """Wipe sessions/results and start a demo session a few puzzles in.

    Returns the demo session id.
    """
    storage.clear_results()
    for snapshot in storage.list_sessions():
        storage.delete_session(snapshot["session_id"])
    sessions.reset()

    session = sessions.start_session(DEMO_ADVENTURE, DEMO_TEAM)
    for puzzle_id, answer in DEMO_ANSWERS.items():
        session.submit_answer(puzzle_id, answer)
    storage.save_session(session.snapshot())

    print(
        f"Started demo session {session.id} on {DEMO_ADVENTURE} "
        f"({len(DEMO_ANSWERS)} puzzles solved, team of {len(DEMO_TEAM)})."
    )
    return session.id
