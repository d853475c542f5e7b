"""Rich rendering of analysis results and session records."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.analysis import AnalysisResult, InterviewScore, SpeechQuality
from ..models.capture import CaptureStats
from ..models.session import SessionRecord

QUALITY_STYLES = {
    SpeechQuality.POOR: "bold red",
    SpeechQuality.FAIR: "bold yellow",
    SpeechQuality.GOOD: "bold green",
    SpeechQuality.EXCELLENT: "bold cyan",
}


def analysis_table(result: AnalysisResult) -> Table:
    table = Table(title="Transcript analysis", show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Speech", "Spoken content", "yes" if result.has_spoken_content else "no")
    table.add_row("", "Words", str(result.word_count))
    table.add_row("", "Filler words", str(result.filler_word_count))
    table.add_row("", "Content density", f"{result.content_density:.2f} words/s")
    table.add_row("Pacing", "Words per minute", f"{result.pacing.words_per_minute:.0f}")
    table.add_row("", "Pause frequency", f"{result.pacing.pause_frequency:.2f}")
    table.add_row("", "Consistency", f"{result.pacing.pace_consistency:.0f}")
    table.add_row("", "Score", f"{result.pacing.score:.0f}")
    table.add_row("Vocabulary", "Diversity", f"{result.vocabulary.diversity:.2f}")
    table.add_row("", "Complexity", f"{result.vocabulary.complexity:.2f}")
    table.add_row("", "Domain specificity", f"{result.vocabulary.domain_specificity:.2f}")
    table.add_row("", "Score", f"{result.vocabulary.score:.0f}")
    table.add_row("Sentiment", "Positivity", f"{result.sentiment.positivity:.2f}")
    table.add_row("", "Enthusiasm", f"{result.sentiment.enthusiasm:.2f}")
    table.add_row("", "Confidence", f"{result.sentiment.confidence:.2f}")
    table.add_row("", "Score", f"{result.sentiment.score:.0f}")
    table.add_row("Structure", "Organization", f"{result.structure.organization:.0f}")
    table.add_row("", "Coherence", f"{result.structure.coherence:.0f}")
    table.add_row("", "Completeness", f"{result.structure.completeness:.0f}")
    table.add_row("", "Score", f"{result.structure.score:.0f}")
    return table


def score_table(score: InterviewScore) -> Table:
    table = Table(title="Interview score", show_header=True, header_style="bold magenta")
    table.add_column("Area")
    table.add_column("Score", justify="right")
    table.add_row("Verbal", f"{score.verbal:.0f}")
    table.add_row("Non-verbal", f"{score.non_verbal:.0f}")
    table.add_row("Content", f"{score.content:.0f}")
    table.add_row("Engagement", f"{score.engagement:.0f}")
    table.add_row(Text("Overall", style="bold"), Text(f"{score.overall:.0f}", style="bold"))
    return table


def verdict_panel(result: AnalysisResult) -> Panel:
    text = Text()
    text.append("Confidence ", style="bold")
    text.append(f"{result.confidence_score:.0f}/100  ")
    text.append(result.speech_quality.value.upper(), style=QUALITY_STYLES[result.speech_quality])
    if not result.has_spoken_content:
        text.append("\nNo speech was detected in the recording.", style="dim")
    return Panel(text, title="Verdict", expand=False)


def render_analysis(console: Console, result: AnalysisResult, score: Optional[InterviewScore] = None) -> None:
    console.print(verdict_panel(result))
    console.print(analysis_table(result))
    if score is not None:
        console.print(score_table(score))


def render_record(console: Console, record: SessionRecord) -> None:
    console.print(f"[bold]Session[/bold] {record.session_id}  "
                  f"{record.mime_type}, {record.size_bytes} bytes, {record.duration_seconds:.1f}s")
    if record.audio_file:
        console.print(f"[dim]Saved to {record.audio_file}[/dim]")
    if record.transcript:
        console.print(Panel(record.transcript, title="Transcript"))
    render_analysis(console, record.analysis, record.score)


def format_stats(stats: CaptureStats) -> str:
    level = int(stats.peak_level * 20)
    meter = "█" * level + "░" * (20 - level)
    return (f"{stats.state.value} {stats.elapsed_seconds:5.1f}s  "
            f"{stats.chunk_count} chunks  {stats.total_bytes / 1024:.0f} KB  {meter}")
