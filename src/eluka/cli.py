"""Command-line interface for the Eluka binary classifier.

Provides ``encode``, ``train``, ``classify`` and ``suggest-features``
commands with rich terminal output using the ``click`` and ``rich``
libraries. Backend settings come from ``ELUKA_*`` environment variables
(or a ``.env`` file) unless given as options.

Usage::

    eluka encode examples.jsonl
    eluka train examples.jsonl --workdir spam-model
    eluka classify --workdir spam-model "cheap pills online"
    eluka suggest-features examples.jsonl --workdir spam-model
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ModelConfig
from .datapoint import DataPoint, TextInput
from .errors import ElukaError
from .features import FeatureSpace
from .model import ClassifierModel, label_bijection
from .models import Label, Weighting
from .parsers import read_examples
from .vectors import VectorCollection

console = Console()

SNAPSHOT_NAME = "eluka.json"


def _get_label_style(label: Label) -> str:
    """Return a rich style string for a label."""
    return {
        Label.POSITIVE: "bold green",
        Label.NEGATIVE: "bold red",
        Label.UNKNOWN: "dim",
    }.get(label, "")


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="eluka")
@click.option("--verbose", "-v", is_flag=True, help="Log backend calls and their output.")
def main(verbose: bool) -> None:
    """Eluka: binary classification over an external SVM backend.

    Encodes feature maps or text as sparse vectors, trains a model with
    LibSVM-compatible tools, and classifies new data.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the sparse file here instead of stdout.")
@click.option("--vocab", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write the feature ID table as JSON.")
@click.option("--weighting", type=click.Choice([w.value for w in Weighting]),
              default=Weighting.TERM_FREQUENCY.value, help="Text term weighting.")
def encode(data: Path, output: Path | None, vocab: Path | None, weighting: str) -> None:
    """Encode an example file in sparse training format.

    Unlabeled examples are written with the placeholder label 0.

    Example: eluka encode examples.jsonl -o train.txt
    """
    labels = label_bijection()
    space = FeatureSpace()
    collection = VectorCollection(space)
    try:
        for example in read_examples(data):
            point = DataPoint.build(example.datum, space, weighting=Weighting(weighting))
            code = labels.code_of(example.label) if example.label else None
            collection.add(point, code)
    except (ValueError, ElukaError) as e:
        _fail(e)

    if output:
        collection.write(output)
        console.print(f"[dim]Wrote {len(collection)} line(s) to {output}[/]")
    else:
        click.echo(collection.serialize(), nl=False)

    if vocab:
        vocab.write_text(json.dumps(dict(space.items()), indent=2), encoding="utf-8")


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--workdir", "-w", type=click.Path(file_okay=False, path_type=Path), required=True,
              help="Working directory for the model files.")
@click.option("--train-options", default=None, help='Extra trainer arguments, e.g. "-t 0 -c 1".')
@click.option("--timeout", type=float, default=None, help="Seconds allowed per backend call.")
@click.option("--weighting", type=click.Choice([w.value for w in Weighting]), default=None,
              help="Text term weighting.")
def train(
    data: Path,
    workdir: Path,
    train_options: str | None,
    timeout: float | None,
    weighting: str | None,
) -> None:
    """Train a model from a labeled example file.

    Example: eluka train examples.jsonl --workdir spam-model
    """
    try:
        config = ModelConfig.from_env(
            directory=workdir,
            train_options=train_options,
            timeout=timeout,
            weighting=weighting,
        )
        model = ClassifierModel(config)
        for example in read_examples(data):
            if example.label is None:
                raise ValueError(f"{data.name}, line {example.line_number}: missing label")
            model.add(example.datum, example.label)

        with console.status("[bold blue]Training model...", spinner="dots"):
            result = model.build()
        model.save(model.directory / SNAPSHOT_NAME)
    except (ValueError, ElukaError) as e:
        _fail(e)

    counts = ", ".join(f"{name}: {n}" for name, n in sorted(result.label_counts.items()))
    console.print(Panel(
        f"[bold]{result.example_count}[/] examples ({counts})\n"
        f"[bold]{result.feature_count}[/] features\n"
        f"Model: {result.model_path}",
        title="Model trained",
        border_style="blue",
    ))


@main.command()
@click.argument("texts", nargs=-1)
@click.option("--workdir", "-w", type=click.Path(exists=True, file_okay=False, path_type=Path),
              required=True, help="Working directory of a trained model.")
@click.option("--input", "-i", "input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Example file to classify (labels are ignored).")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def classify(texts: tuple[str, ...], workdir: Path, input_file: Path | None, output: str) -> None:
    """Classify texts or the examples of a file with a trained model.

    Example: eluka classify --workdir spam-model "cheap pills online"
    """
    snapshot = workdir / SNAPSHOT_NAME
    try:
        if not snapshot.exists():
            raise FileNotFoundError(f"No trained model in {workdir} (missing {SNAPSHOT_NAME})")
        overrides = {**ModelConfig.env_overrides(), "directory": workdir}
        model = ClassifierModel.load(snapshot, **overrides)

        inputs = [TextInput(t) for t in texts]
        names = list(texts)
        if input_file:
            for example in read_examples(input_file):
                inputs.append(example.datum)
                names.append(f"{input_file.name}:{example.line_number}")
        if not inputs:
            raise ValueError("Nothing to classify. Pass TEXTS or --input.")

        with console.status("[bold blue]Classifying...", spinner="dots"):
            labels = model.classify_batch(inputs)
    except (OSError, ValueError, ElukaError) as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps(
            [{"input": name, "label": label.value} for name, label in zip(names, labels)],
            indent=2,
        ))
        return

    table = Table(title="Classification", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Input", style="white", max_width=60)
    table.add_column("Label", justify="center", width=10)
    for i, (name, label) in enumerate(zip(names, labels), 1):
        excerpt = name[:80].replace("\n", " ") + ("..." if len(name) > 80 else "")
        table.add_row(str(i), excerpt, Text(label.value, style=_get_label_style(label)))
    console.print(table)


@main.command("suggest-features")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--workdir", "-w", type=click.Path(file_okay=False, path_type=Path), required=True,
              help="Working directory for the selection files.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def suggest_features(data: Path, workdir: Path, output: str) -> None:
    """Rank features of a labeled example file with the selection script.

    Example: eluka suggest-features examples.jsonl --workdir spam-model
    """
    try:
        model = ClassifierModel(ModelConfig.from_env(directory=workdir))
        for example in read_examples(data):
            if example.label is None:
                raise ValueError(f"{data.name}, line {example.line_number}: missing label")
            model.add(example.datum, example.label)

        with console.status("[bold blue]Selecting features...", spinner="dots"):
            features = model.suggest_features()
    except (ValueError, ElukaError) as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps([list(f) if isinstance(f, tuple) else f for f in features], indent=2))
        return

    table = Table(title=f"Selected features - {data.name}")
    table.add_column("Rank", justify="right", width=5)
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="white")
    for rank, feature in enumerate(features, 1):
        name, value = feature if isinstance(feature, tuple) else (feature, "")
        table.add_row(str(rank), name, value)
    console.print(table)


if __name__ == "__main__":
    main()
