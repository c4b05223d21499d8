import plotly.express as px
import pandas as pd


def export_segments(rows, path: str):
    """Writes an HTML bar chart of operators per barrier segment."""
    if not rows:
        with open(path, "w") as f:
            f.write("<h1>DirectML Plan Segments</h1><p>No operators to display.</p>")
        return

    df = pd.DataFrame(rows)
    df['segment'] = pd.to_numeric(df['segment'], errors='coerce')
    df = df.dropna(subset=['segment'])
    df['segment'] = df['segment'].astype(int)
    df['count'] = 1

    hover_data_cols = ['step', 'segment', 'num_inputs', 'num_outputs']
    existing_hover_cols = [c for c in hover_data_cols if c in df.columns]

    fig = px.bar(
        df,
        x="segment",
        y="count",
        color="op",
        hover_name="name",
        hover_data=existing_hover_cols,
        title="DirectML Plan Segments (operators between Global UAV Barriers)",
        labels={"segment": "Barrier Segment", "count": "Operators", "op": "Operator"}
    )

    fig.update_xaxes(dtick=1)
    fig.update_layout(
        barmode="stack",
        height=max(500, df['segment'].nunique() * 25),
        font=dict(family="Courier New, monospace", size=12),
        legend_title="Operator"
    )

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)


def export_segments_ascii(segments, barrier_name: str = "Global UAV Barrier"):
    if not segments or not any(segments):
        return "Plan has no operators."

    width = max(len(barrier_name) + 8, 40)
    chart = "DirectML Plan Segments (ASCII)\n"
    chart += ("-" * width) + "\n"

    for i, ops in enumerate(segments):
        if i > 0:
            chart += f"{('[ ' + barrier_name + ' ]'):^{width}}\n"
        names = ", ".join(ops) if ops else "(empty)"
        chart += f"{i:>4} | {names}\n"

    chart += ("-" * width) + "\n"
    chart += f"{len(segments)} segments, {sum(len(s) for s in segments)} operators\n"
    return chart
