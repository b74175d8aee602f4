"""CLI interface for the PEI Assistant.

Works on a JSON form file (``{"field-id": "value", ...}``) and the local
JSON record store configured by ``PEI_STORE_PATH``.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional

import typer

from pei.agents.invoker import AIInvoker
from pei.agents.orchestrator import (
    ACTION_ACTIVITIES,
    ACTION_ANALYZE,
    ACTION_FILL,
    ACTION_FULL_PEI,
    ACTION_SMART,
    ActionResult,
    PeiOrchestrator,
)
from pei.app.context import AppContext
from pei.config.fields import FORM_SECTIONS, REQUIRED_FIELDS
from pei.config.settings import AppSettings
from pei.form.state import FormState
from pei.ingest.rag_reader import read_rag_file
from pei.storage.local import LocalRecordStore

app = typer.Typer(help="PEI Assistant - AI-assisted Individualized Education Plans")

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _load_form(form_path: str) -> Dict[str, str]:
    path = Path(form_path)
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return {str(k): "" if v is None else str(v) for k, v in data.items()}


def _write_form(form_path: str, data: Dict[str, str]) -> None:
    with open(form_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def _session(ctx: typer.Context, form_path: Optional[str] = None) -> PeiOrchestrator:
    settings: AppSettings = ctx.obj["settings"]
    context = AppContext.for_view(ctx.obj["view"])
    context.thinking_mode_enabled = ctx.obj["thinking"]
    form = FormState()
    if form_path:
        form.update(_load_form(form_path))
    return PeiOrchestrator(
        AIInvoker.from_settings(settings),
        LocalRecordStore(settings.store_path),
        form=form,
        context=context,
    )


def _report(result: ActionResult) -> None:
    if result.ok:
        return
    typer.echo(f"✗ {result.message}", err=True)
    if result.error_fields:
        typer.echo(f"  Campos: {', '.join(result.error_fields)}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    view: Optional[str] = typer.Option(None, "--view", help="Initial view"),
    thinking: bool = typer.Option(False, "--thinking", help="Enable extended reasoning"),
    store: Optional[str] = typer.Option(None, "--store", help="JSON record store path"),
):
    settings = AppSettings.from_env()
    if store:
        settings = settings.model_copy(update={"store_path": store})
    ctx.obj = {"settings": settings, "view": view, "thinking": thinking}


@app.command()
def fields(
    ctx: typer.Context,
    form: Optional[str] = typer.Option(None, "--form", help="Form JSON to report progress for"),
):
    """List the form sections and fields (with progress when --form is given)."""
    state = FormState()
    if form:
        state.update(_load_form(form))
    typer.echo(f"View: {AppContext.for_view(ctx.obj['view']).current_view}")
    progress = state.section_progress()
    for section in FORM_SECTIONS:
        typer.echo(f"\n{section.title}  [{progress[section.title]}%]")
        for field in section.fields:
            marker = "*" if field.id in REQUIRED_FIELDS else " "
            filled = "✓" if state.get(field.id).strip() else " "
            typer.echo(f"  {marker}{filled} {field.id:<20} {field.label}")


@app.command()
def attach(
    ctx: typer.Context,
    file_path: str = typer.Argument(..., help="Support file (txt/md/pdf/docx/image)"),
    select: bool = typer.Option(True, "--select/--no-select", help="Use in prompts"),
):
    """Add a support file to the store."""
    settings: AppSettings = ctx.obj["settings"]
    rag = read_rag_file(file_path).model_copy(update={"selected": select})
    LocalRecordStore(settings.store_path).add_rag_file(rag)
    typer.echo(f"✓ {rag.name} ({rag.type}) added as {rag.id}")


@app.command()
def suggest(
    ctx: typer.Context,
    field_id: str = typer.Argument(..., help="Target field id"),
    form: str = typer.Option("pei_form.json", "--form", help="Form JSON file"),
    action: str = typer.Option(ACTION_FILL, "--action", help="ai / suggest-needs / suggest-adaptations / refine"),
    instruction: Optional[str] = typer.Option(None, "--instruction", help="Refinement instruction"),
    approve: bool = typer.Option(False, "--approve", help="Commit the suggestion to the form file"),
):
    """Draft text for one field; with --approve it is written to the form."""
    orch = _session(ctx, form)
    result = asyncio.run(orch.run_action(field_id, action, instruction=instruction))
    _report(result)
    if result.draft is None:
        typer.echo(f"✗ A ação '{action}' não gera texto para o campo.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"--- {result.draft.field_label or field_id} ---")
    typer.echo(result.draft.content)
    if approve:
        orch.approve()
        _write_form(form, orch.form.data)
        typer.echo(f"\n✓ Sugestão aprovada e gravada em {form}")


@app.command()
def smart(
    ctx: typer.Context,
    field_id: str = typer.Argument(..., help="Goal field id (metas-curto/medio/longo)"),
    form: str = typer.Option("pei_form.json", "--form", help="Form JSON file"),
):
    """SMART critique of a goal."""
    orch = _session(ctx, form)
    result = asyncio.run(orch.run_action(field_id, ACTION_SMART))
    _report(result)
    for name, criterion in result.critique.criteria().items():
        typer.echo(f"\n[{name}]")
        typer.echo(f"  Crítica:  {criterion.critique}")
        typer.echo(f"  Sugestão: {criterion.suggestion}")


@app.command()
def activities(
    ctx: typer.Context,
    field_id: str = typer.Argument(..., help="Goal, activities or DUA field id"),
    form: str = typer.Option("pei_form.json", "--form", help="Form JSON file"),
    save: bool = typer.Option(False, "--save", help="Add the suggestions to the activity bank"),
):
    """Suggest 3-5 adapted activities."""
    orch = _session(ctx, form)
    result = asyncio.run(orch.run_action(field_id, ACTION_ACTIVITIES))
    _report(result)
    for i, act in enumerate(result.activities, 1):
        typer.echo(f"\n{i}. {act.title}  [{act.discipline}]")
        typer.echo(f"   {act.description}")
        if act.goal_tags:
            typer.echo(f"   Tags: {', '.join(act.goal_tags)}")
    if save:
        saved = asyncio.run(orch.save_activities(result.activities))
        typer.echo(f"\n✓ {len(saved)} atividades foram salvas no Banco de Atividades!")


@app.command()
def analyze(
    ctx: typer.Context,
    form: str = typer.Option("pei_form.json", "--form", help="Form JSON file"),
):
    """Intelligent analysis of the whole PEI."""
    orch = _session(ctx, form)
    result = asyncio.run(orch.run_action("", ACTION_ANALYZE))
    _report(result)
    analysis = result.analysis
    typer.echo("Pontos fortes:")
    for item in analysis.strengths:
        typer.echo(f"  + {item}")
    typer.echo("Pontos fracos:")
    for item in analysis.weaknesses:
        typer.echo(f"  - {item}")
    typer.echo(f"\nMetas:\n{analysis.goal_analysis}")
    typer.echo(f"\nAnálise pedagógica:\n{analysis.pedagogical_analysis}")
    typer.echo(f"\nAnálise psicopedagógica:\n{analysis.psychopedagogical_analysis}")
    typer.echo("\nSugestões:")
    for item in analysis.suggestions:
        typer.echo(f"  * {item}")


@app.command()
def generate(
    ctx: typer.Context,
    form: str = typer.Option("pei_form.json", "--form", help="Form JSON file"),
    output: Optional[str] = typer.Option(None, "--out", help="Write the PEI to this file"),
    save: bool = typer.Option(False, "--save", help="Save the form to the record store"),
):
    """Generate the complete PEI document."""
    orch = _session(ctx, form)
    result = asyncio.run(orch.run_action("", ACTION_FULL_PEI))
    _report(result)
    if output:
        Path(output).write_text(result.text, encoding="utf-8")
        typer.echo(f"✓ PEI gravado em {output}")
    else:
        typer.echo(result.text)
    if save:
        record = asyncio.run(orch.save())
        typer.echo(f"✓ PEI salvo ({record.id})")


@app.command(name="list")
def list_peis(ctx: typer.Context):
    """List saved PEIs."""
    settings: AppSettings = ctx.obj["settings"]
    records = LocalRecordStore(settings.store_path).list_peis()
    if not records:
        typer.echo("Nenhum PEI salvo.")
        return
    for record in records:
        typer.echo(f"{record.id}  {record.timestamp}  {record.student_name}")


if __name__ == "__main__":
    app()
