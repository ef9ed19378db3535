"""CLI tools for ClarityClaim administration."""

import uuid

import click

from app.core.config import settings
from app.core.security import create_access_token
from app.db.base import Base
from app.db.models import Organization, Payer, Profile
from app.db.session import SessionLocal, engine

DEMO_PAYERS = (
    ("Blue Cross Blue Shield", "commercial", 180),
    ("Medicare", "medicare", 120),
    ("Medicaid", "medicaid", 90),
)


@click.group()
def cli():
    """ClarityClaim CLI tools."""
    pass


@cli.command()
def init_db():
    """Create all tables on the configured database (local development only)."""
    Base.metadata.create_all(bind=engine)
    click.echo("✅ Schema created")


@cli.command()
@click.option("--name", default="Demo Health Clinic", help="Organization name")
@click.option("--slug", default="demo-clinic", help="URL-friendly slug")
@click.option("--email", default="demo@clarityclaim.dev", help="Demo user email")
@click.option("--expires-minutes", default=24 * 60, help="Token lifetime in minutes")
def seed_demo(name: str, slug: str, email: str, expires_minutes: int):
    """
    Create a demo organization, payers and profile, then print a bearer token.

    Example:
        python -m app.cli seed-demo --slug demo-clinic
    """
    if settings.ENV != "dev":
        click.echo("❌ seed-demo only runs when ENV=dev")
        raise SystemExit(1)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        slug = slug.lower().strip()
        org = db.query(Organization).filter(Organization.slug == slug).first()
        if org:
            click.echo(f"ℹ️  Organization '{slug}' already exists, reusing it")
        else:
            org = Organization(name=name, slug=slug)
            db.add(org)
            db.flush()
            for payer_name, payer_type, deadline_days in DEMO_PAYERS:
                db.add(
                    Payer(
                        organization_id=org.id,
                        name=payer_name,
                        type=payer_type,
                        appeal_deadline_days=deadline_days,
                    )
                )

        email = email.lower().strip()
        profile = db.query(Profile).filter(Profile.email == email).first()
        if profile is None:
            profile = Profile(id=uuid.uuid4(), email=email, first_name="Demo", last_name="User")
            db.add(profile)
        profile.organization_id = org.id
        db.commit()

        token = create_access_token(profile.id, email=email, expires_minutes=expires_minutes)
        click.echo(f"✅ Organization: {org.name} ({org.id})")
        click.echo(f"   User: {email} ({profile.id})")
        click.echo("")
        click.echo("Bearer token:")
        click.echo(token)
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    cli()
