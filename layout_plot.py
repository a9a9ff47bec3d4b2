import matplotlib.patches as patches
import matplotlib.pyplot as plt

PRIMARY_COLOR = "#6fa8dc"
EXTRA_COLOR = "#93c47d"
EXTRA_ROTATED_COLOR = "#5a7"
LEFTOVER_COLOR = "#f4cccc"


def draw_sheet_layout(layout, ax=None, show_labels=True):
    if ax is None:
        fig, ax = plt.subplots(figsize=(5, 7))
    else:
        fig = ax.figure

    ax.set_xlim(0, layout.sheet_width)
    ax.set_ylim(layout.sheet_length, 0)
    ax.set_aspect('equal')
    ax.axis('off')
    ax.add_patch(patches.Rectangle((0, 0), layout.sheet_width, layout.sheet_length, fc='#eef5ff', ec='#333'))

    for area in layout.leftover_areas:
        ax.add_patch(patches.Rectangle((area.x, area.y), area.width, area.height, fc=LEFTOVER_COLOR, ec='red', ls='--', hatch='//', alpha=0.5))

    for blank in layout.blanks:
        ax.add_patch(patches.Rectangle((blank.x, blank.y), blank.width, blank.height, fc=PRIMARY_COLOR, ec='#222'))

    primary_rotation = layout.blanks[0].rotation if layout.blanks else 0
    for blank in layout.extra_blanks:
        fc = EXTRA_ROTATED_COLOR if blank.rotation != primary_rotation else EXTRA_COLOR
        ax.add_patch(patches.Rectangle((blank.x, blank.y), blank.width, blank.height, fc=fc, ec='#222'))

    if show_labels:
        for blank in layout.all_blanks:
            ax.text(blank.x + blank.width / 2, blank.y + blank.height / 2, f"{blank.index + 1}", ha='center', va='center', fontsize=6)

    stats = layout.stats
    ax.set_title(
        f"{layout.direction.value}: {stats.total_blanks} blanks "
        f"({stats.primary_blanks} + {stats.extra_blanks}), {stats.efficiency:.1f}% used",
        fontsize=9,
    )
    return fig
