import json

import click
from flask import current_app
from flask.cli import AppGroup

from .errors import ShortlistError
from .extensions import db, tenant_lock
from .jobs.shortlist import ShortlistBatch

shortlist_cli = AppGroup("shortlist", help="Run the analyze-and-shortlist batch outside a request.")


@shortlist_cli.command("run")
@click.option("--org-id", type=int, required=True, help="Tenant to analyze.")
@click.option("--job-id", type=int, default=None, help="Only candidates of this job.")
@click.option("--candidate-id", "candidate_ids", type=int, multiple=True, help="Repeatable.")
def run_batch(org_id, job_id, candidate_ids):
    try:
        batch = ShortlistBatch.from_app(current_app, db.session)
        with tenant_lock.hold(org_id):
            summary = batch.run(org_id, job_id=job_id, candidate_ids=list(candidate_ids) or None)
    except ShortlistError as e:
        raise click.ClickException(e.message)
    click.echo(json.dumps(summary.to_response(), indent=2, ensure_ascii=False))
