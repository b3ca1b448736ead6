import pytest

from bingo.card import Card, Cell, has_bingo, winning_cells, winning_lines


def empty(n):
    return [[False] * n for _ in range(n)]


def make_card(labels, free_at=(2, 2)):
    size = len(labels)
    return Card(
        [
            Cell(label=labels[r][c], free=(free_at == (r, c)))
            for c in range(size)
        ]
        for r in range(size)
    )


def five_by_five():
    return [[f"A{r}{c}" for c in range(5)] for r in range(5)]


@pytest.mark.parametrize('n', [1, 2, 3, 5, 7])
def test_empty_matrix_never_wins(n):
    assert has_bingo(empty(n)) is False
    assert winning_lines(empty(n)) == []


@pytest.mark.parametrize('n', [2, 3, 5])
def test_each_line_kind_is_detected(n):
    for r in range(n):
        m = empty(n)
        m[r] = [True] * n
        assert winning_lines(m) == [[(r, c) for c in range(n)]]
    for c in range(n):
        m = empty(n)
        for r in range(n):
            m[r][c] = True
        assert winning_lines(m) == [[(r, c) for r in range(n)]]
    m = empty(n)
    for i in range(n):
        m[i][i] = True
    assert winning_lines(m) == [[(i, i) for i in range(n)]]
    m = empty(n)
    for i in range(n):
        m[i][n - 1 - i] = True
    assert winning_lines(m) == [[(i, n - 1 - i) for i in range(n)]]


def test_single_cell_matrix_satisfies_every_line():
    lines = winning_lines([[True]])
    assert lines == [[(0, 0)]] * 4
    assert winning_cells([[True]]) == [(0, 0)]


def test_overlapping_lines_are_all_listed():
    m = empty(5)
    m[0] = [True] * 5
    for r in range(5):
        m[r][0] = True
    lines = winning_lines(m)
    assert len(lines) == 2
    assert (0, 0) in lines[0] and (0, 0) in lines[1]
    assert len(winning_cells(m)) == 9


def test_incomplete_lines_do_not_win():
    m = empty(5)
    m[0] = [True, True, True, True, False]
    assert has_bingo(m) is False


def test_non_square_matrix_is_rejected():
    with pytest.raises(ValueError):
        winning_lines([[True, True], [True]])
    with pytest.raises(ValueError):
        winning_lines([])


def test_mark_missing_label_changes_nothing():
    card = make_card(five_by_five())
    before = card.to_payload()
    assert card.mark('Nowhere Air') == 0
    assert card.to_payload() == before


def test_mark_hits_every_matching_cell():
    labels = five_by_five()
    labels[0][1] = labels[3][4] = labels[4][0] = 'Delta'
    card = make_card(labels)
    assert card.mark('Delta') == 3
    marked = [(r, c) for r, row in enumerate(card.cells) for c, cell in enumerate(row) if cell.marked]
    assert marked == [(0, 1), (3, 4), (4, 0)]


def test_mark_is_idempotent():
    labels = five_by_five()
    card = make_card(labels)
    assert card.mark('A00') == 1
    assert card.mark('A00') == 0
    assert card.cells[0][0].marked is True


def test_free_cell_counts_without_being_marked():
    labels = five_by_five()
    card = make_card(labels)
    for r in (0, 1, 3, 4):
        card.mark(labels[r][r])
    assert card.cells[2][2].marked is False
    assert card.has_bingo() is True
    assert card.winning_lines() == [[(i, i) for i in range(5)]]


def test_row_win_with_free_centre_does_not_report_diagonal():
    labels = five_by_five()
    card = make_card(labels)
    for c in range(5):
        card.mark(labels[0][c])
    assert card.has_bingo() is True
    assert card.winning_lines() == [[(0, c) for c in range(5)]]


def test_more_than_one_free_cell_is_rejected():
    with pytest.raises(ValueError):
        Card([[Cell('a', free=True), Cell('b', free=True)], [Cell('c'), Cell('d')]])


def test_payload_accepts_integer_flags():
    rows = [[{'airline': 'X', 'marked': 1, 'free': 0}, {'airline': 'FREE', 'marked': 0, 'free': 1}],
            [{'airline': 'Y', 'marked': 0, 'free': 0}, {'airline': 'Z', 'marked': 1, 'free': 0}]]
    card = Card.from_payload(rows)
    assert card.covered_matrix() == [[True, True], [False, True]]
    assert card.to_payload()[0][1] == {'airline': 'FREE', 'marked': False, 'free': True}
