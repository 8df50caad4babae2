"""Board constants, coordinates, and text-based rendering."""

from __future__ import annotations

DEFAULT_WIDTH = 8
DEFAULT_HEIGHT = 8
MAX_DIMENSION = 14
MIN_DIMENSION = 3

PLAYER_COLOR = "white"
PLAYER_TURN = "player"

# Casual to threatening
ENEMY_FACTION_COLORS: list[str] = ["black", "orange", "cyan", "red", "purple"]

COSMETICS: list[str] = ["sunglasses", "tophat", "partyhat", "bowtie", "heart", "star"]

# Direction vectors as (dx, dy); y grows downward
ORTHOGONAL = [(0, -1), (0, 1), (-1, 0), (1, 0)]
DIAGONAL = [(-1, -1), (1, -1), (-1, 1), (1, 1)]
ALL_DIRS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]
KNIGHT_OFFSETS = [(1, 2), (1, -2), (-1, 2), (-1, -2), (2, 1), (2, -1), (-2, 1), (-2, -1)]

COL_LABELS = "abcdefghijklmn"


def xy_to_notation(x: int, y: int, height: int) -> str:
    """Convert (x, y) to a label like 'e1' (row 1 is the bottom row)."""
    return f"{COL_LABELS[x]}{height - y}"


def notation_to_xy(sq: str, height: int) -> tuple[int, int]:
    """Convert a label like 'e1' back to (x, y).

    Raises:
        ValueError: If the label is malformed.
    """
    sq = sq.strip().lower()
    if len(sq) < 2 or sq[0] not in COL_LABELS:
        raise ValueError(f"Invalid square: {sq!r}")
    x = COL_LABELS.index(sq[0])
    row = int(sq[1:])
    return (x, height - row)


# Single-character codes used by render_board
PIECE_LETTERS = {
    "King": "K",
    "Queen": "Q",
    "Rook": "R",
    "Bishop": "B",
    "Knight": "N",
    "Pawn": "P",
}


def render_board(cells, turn: str | None = None, level: int | None = None) -> str:
    """Render the board as a text string.

    Args:
        cells: height x width list of lists. Each cell is None or a
            display tuple: ("piece", piece_type, color), ("wall",),
            ("chest",) or ("ally", piece_type).
        turn: Optional active turn label.
        level: Optional level number.
    """
    height = len(cells)
    width = len(cells[0]) if height else 0
    lines = []

    if level is not None:
        lines.append(f"Level {level}")
    if turn is not None:
        lines.append(f"Turn: {turn}")
    if lines:
        lines.append("")

    header = "    " + "   ".join(COL_LABELS[:width])
    border = "  +" + "---+" * width
    lines.append(header)
    lines.append(border)

    for y in range(height):
        row_label = height - y
        row_str = f"{row_label:2d}|"
        for x in range(width):
            cell = cells[y][x]
            if cell is None:
                row_str += "   |"
            elif cell[0] == "wall":
                row_str += "###|"
            elif cell[0] == "chest":
                row_str += " $ |"
            elif cell[0] == "ally":
                row_str += f" {PIECE_LETTERS[cell[1]].lower()}?|"
            else:
                _, piece_type, color = cell
                letter = PIECE_LETTERS[piece_type]
                # Uppercase for the player, lowercase plus faction initial for enemies
                if color == PLAYER_COLOR:
                    row_str += f" {letter} |"
                else:
                    row_str += f" {letter.lower()}{color[0]}|"
        row_str += f" {row_label}"
        lines.append(row_str)
        lines.append(border)

    lines.append(header)
    return "\n".join(lines)
