import json
from decimal import Decimal

import pandas as pd

from storefront.model import Product, Role, User
from storefront.services.catalog_service import FEATURED_KEY


def test_create_admin(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["create-admin", "--email", "Boss@Example.com", "--password", "pw123456", "--name", "Boss"])
    assert result.exit_code == 0
    assert "Admin created" in result.output

    user = User.query.filter_by(email="boss@example.com").one()
    assert user.role == Role.ADMIN
    assert user.check_password("pw123456")

    again = runner.invoke(args=["create-admin", "--email", "boss@example.com", "--password", "x", "--name", "B"])
    assert "Email already exists" in again.output
    assert User.query.count() == 1


def test_export_then_import(app, make_product, tmp_path):
    make_product(name="Tee", price=Decimal("10.00"))
    make_product(name="Cap", price=Decimal("5.25"), category="hats", featured=True)
    out = tmp_path / "products.csv"

    runner = app.test_cli_runner()
    result = runner.invoke(args=["export-products", "--out", str(out)])
    assert result.exit_code == 0
    df = pd.read_csv(out)
    assert list(df.columns) == ["ID", "Name", "Description", "Price", "Image", "Category", "Featured"]
    assert sorted(df["Name"]) == ["Cap", "Tee"]

    result = runner.invoke(args=["import-products", str(out)])
    assert result.exit_code == 0, result.output
    assert "2 products imported" in result.output
    assert Product.query.count() == 4
    caps = Product.query.filter_by(name="Cap").all()
    assert all(p.price == Decimal("5.25") and p.is_featured for p in caps)


def test_import_refreshes_featured_snapshot(app, tmp_path, redis_client):
    csv_path = tmp_path / "in.csv"
    pd.DataFrame([
        {"Name": "Boot", "Description": "Leather", "Price": 80, "Category": "shoes", "Featured": "yes"},
    ]).to_csv(csv_path, index=False)

    result = app.test_cli_runner().invoke(args=["import-products", str(csv_path)])
    assert result.exit_code == 0, result.output
    assert [p["name"] for p in json.loads(redis_client.get(FEATURED_KEY))] == ["Boot"]


def test_import_rejects_missing_columns(app, tmp_path):
    csv_path = tmp_path / "bad.csv"
    pd.DataFrame([{"Name": "Boot"}]).to_csv(csv_path, index=False)
    result = app.test_cli_runner().invoke(args=["import-products", str(csv_path)])
    assert result.exit_code != 0
    assert "Missing columns" in result.output
    assert Product.query.count() == 0
