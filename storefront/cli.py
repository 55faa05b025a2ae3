# storefront/cli.py
import click
import pandas as pd
from sqlalchemy.exc import IntegrityError

from .extensions import db
from .model import Product, Role, User
from .services.catalog_service import refresh_featured_cache
from .utils.money import D, round_money

EXPORT_COLUMNS = ["ID", "Name", "Description", "Price", "Image", "Category", "Featured"]


@click.command("create-admin")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
def create_admin(email, password, name):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = User(email=email, name=name, role=Role.ADMIN)
    u.set_password(password)
    db.session.add(u); db.session.commit()
    click.echo(f"Admin created: {u.id} {u.email}")


@click.command("export-products")
@click.option("--out", "out_path", default="products_export.csv", show_default=True)
def export_products(out_path):
    rows = [
        {
            "ID": str(p.id),
            "Name": p.name,
            "Description": p.description,
            "Price": float(p.price or 0),
            "Image": p.image,
            "Category": p.category,
            "Featured": bool(p.is_featured),
        }
        for p in Product.query.order_by(Product.created_at.asc()).all()
    ]
    pd.DataFrame(rows, columns=EXPORT_COLUMNS).to_csv(out_path, index=False)
    click.echo(f"{len(rows)} products exported to {out_path}")


@click.command("import-products")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
def import_products(csv_path):
    df = pd.read_csv(csv_path, keep_default_na=False)
    # Clean column names (remove extra spaces)
    df.columns = df.columns.str.strip()
    missing = {"Name", "Description", "Price", "Category"} - set(df.columns)
    if missing:
        raise click.ClickException(f"Missing columns: {', '.join(sorted(missing))}")

    products = []
    for _, row in df.iterrows():
        price = round_money(D(row["Price"]))
        if price < 0:
            raise click.ClickException(f"Negative price for {row['Name']}")
        products.append(Product(
            name=str(row["Name"]).strip(),
            description=str(row["Description"]).strip(),
            price=price,
            image=str(row.get("Image", "") or ""),
            category=str(row["Category"]).strip(),
            is_featured=str(row.get("Featured", "")).strip().lower() in {"1", "true", "yes"},
        ))
    try:
        db.session.add_all(products)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise click.ClickException(f"Import failed: {e.orig}")

    if any(p.is_featured for p in products):
        refresh_featured_cache()
    click.echo(f"{len(products)} products imported from {csv_path}")


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(export_products)
    app.cli.add_command(import_products)
