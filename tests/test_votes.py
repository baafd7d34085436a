from nominations.votes import VoteLedger


def test_withdraw_removes_first_occurrence_only():
    ledger = VoteLedger()
    for name in ("Pizza", "Tacos", "Pizza", "Sushi"):
        ledger.cast("c", name)

    assert ledger.withdraw("c", "Pizza")
    assert ledger.votes_of("c") == ["Tacos", "Pizza", "Sushi"]


def test_withdraw_without_vote_fails():
    ledger = VoteLedger()
    ledger.cast("c", "Tacos")
    assert not ledger.withdraw("c", "Pizza")
    assert not ledger.withdraw("nobody", "Tacos")
    assert ledger.votes_of("c") == ["Tacos"]


def test_counts_and_tallies():
    ledger = VoteLedger()
    ledger.cast("a", "Tacos")
    ledger.cast("a", "Tacos")
    ledger.cast("b", "Tacos")
    ledger.cast("b", "Pizza")

    assert ledger.count_for("Tacos") == 3
    assert ledger.tally_of("a") == {"Tacos": 2}
    assert ledger.has_vote("b", "Pizza")
    assert not ledger.has_vote("a", "Pizza")


def test_purge_nominee_reports_removed_votes_per_voter():
    ledger = VoteLedger()
    ledger.cast("a", "Tacos")
    ledger.cast("a", "Pizza")
    ledger.cast("a", "Tacos")
    ledger.cast("b", "Tacos")
    ledger.cast("c", "Pizza")

    assert ledger.purge_nominee("Tacos") == {"a": 2, "b": 1}
    assert ledger.votes_of("a") == ["Pizza"]
    assert ledger.votes_of("b") == []
    assert ledger.count_for("Tacos") == 0


def test_drop_returns_sequence():
    ledger = VoteLedger()
    ledger.cast("a", "Tacos")
    assert ledger.drop("a") == ["Tacos"]
    assert ledger.drop("a") == []
