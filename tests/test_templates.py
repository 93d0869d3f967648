"""
tests/test_templates.py
Unit tests for expressgen.templates (TemplateGenerator).

Tests cover:
- Route generation with and without the JWT middleware
- Controller handlers and model queries
- Custom column schemas
- Skeleton files and the entry-point anchor
- package.json creation and update
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from expressgen.models import (
    DEFAULT_ANCHOR_MARKER,
    GeneratorConfig,
    IdentifierForms,
    PatchStrategy,
    ResourceSchema,
)
from expressgen.patcher import LEDGER_BEGIN, LEDGER_END
from expressgen.templates import (
    MIDDLEWARE_NAME,
    PACKAGE_DEPENDENCIES,
    TemplateGenerator,
)
from expressgen.utils import derive_identifiers


def _registrations(route_text: str) -> List[str]:
    return [line for line in route_text.splitlines() if line.startswith("router.")]


# ===========================================================================
# Routes
# ===========================================================================


class TestRouteGeneration:
    """Router file for one resource."""

    def test_protected_route_injects_middleware_first(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_route(products, protected=True)
        regs = _registrations(text)
        assert len(regs) == 4
        for line in regs:
            args = line.split("(", 1)[1]
            assert args.split(", ")[1] == MIDDLEWARE_NAME
            assert "ProductsController." in args.split(", ")[2]
        assert "const verifyToken = require('../middleware/jwtMiddleware');" in text

    def test_unprotected_route_has_no_middleware(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_route(products, protected=False)
        assert MIDDLEWARE_NAME not in text
        assert "jwtMiddleware" not in text
        assert len(_registrations(text)) == 4

    def test_route_handlers_and_params(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_route(products, protected=False)
        assert "router.post('/', ProductsController.createNewProducts);" in text
        assert "router.get('/', ProductsController.getAllProducts);" in text
        assert "router.patch('/:idProducts', ProductsController.updateProducts);" in text
        assert "router.delete('/:idProducts', ProductsController.deleteProducts);" in text
        assert (
            "const ProductsController = require('../controller/productsController.js');"
            in text
        )
        assert text.endswith("module.exports = router;\n")

    def test_output_is_deterministic(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        assert templates.generate_route(products, True) == templates.generate_route(
            products, True
        )


# ===========================================================================
# Controllers
# ===========================================================================


class TestControllerGeneration:

    def test_controller_imports_model(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_controller(products)
        assert text.startswith("const ProductsModel = require('../models/productsModels');")

    def test_controller_exports_four_handlers(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_controller(products)
        for handler in ("getAllProducts", "createNewProducts", "updateProducts", "deleteProducts"):
            assert f"const {handler} = async (req, res) => {{" in text
            assert f"    {handler}," in text
        assert text.count("res.status(500).json({ message: 'Server Error', error })") == 4

    def test_controller_responses(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_controller(products)
        assert "res.status(201).json({ message: 'Created', data: body })" in text
        assert "res.json({ message: 'Updated', data: { id: idProducts, ...body } })" in text
        assert "res.json({ message: 'Deleted' })" in text
        assert "const { idProducts } = req.params;" in text


# ===========================================================================
# Models
# ===========================================================================


class TestModelGeneration:

    def test_default_columns(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_model(products)
        assert "dbPool.execute('SELECT * FROM products')" in text
        assert '"INSERT INTO products (name, email, address) VALUES (?, ?, ?)",' in text
        assert "[body.name, body.email, body.address]" in text
        assert '"UPDATE products SET name=?, email=?, address=? WHERE id=?",' in text
        assert "[body.name, body.email, body.address, idProducts]" in text
        assert 'dbPool.execute("DELETE FROM products WHERE id=?", [idProducts]);' in text

    def test_custom_schema_changes_columns(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        text = templates.generate_model(products, ResourceSchema(columns=["title", "price"]))
        assert '"INSERT INTO products (title, price) VALUES (?, ?)",' in text
        assert '"UPDATE products SET title=?, price=? WHERE id=?",' in text
        assert "email" not in text

    def test_config_default_columns(self, products: IdentifierForms) -> None:
        tg = TemplateGenerator(GeneratorConfig(default_columns=["sku"]))
        assert "INSERT INTO products (sku) VALUES (?)" in tg.generate_model(products)

    def test_table_uses_lowercase_slug(self, templates: TemplateGenerator) -> None:
        forms = derive_identifiers("OrderItems")
        text = templates.generate_model(forms)
        assert "SELECT * FROM orderitems" in text
        assert "const getAllOrderItems = () => {" in text


# ===========================================================================
# Resource triad
# ===========================================================================


class TestGenerateAllForResource:

    def test_paths_in_write_order(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        files = templates.generate_all_for_resource(products, True)
        assert list(files) == [
            "src/routes/productsRoutes.js",
            "src/controller/productsController.js",
            "src/models/productsModels.js",
        ]

    def test_every_file_ends_with_single_newline(
        self, templates: TemplateGenerator, products: IdentifierForms
    ) -> None:
        for content in templates.generate_all_for_resource(products, False).values():
            assert content.endswith("\n")
            assert not content.endswith("\n\n")


# ===========================================================================
# Skeleton
# ===========================================================================


class TestSkeleton:

    def test_scaffold_file_set(self, templates: TemplateGenerator) -> None:
        files = templates.generate_scaffold_files()
        assert set(files) == {
            "src/index.js",
            "src/config/database.js",
            "src/config/key.js",
            "src/middleware/jwtMiddleware.js",
            "src/controller/authController.js",
            "src/routes/authRoutes.js",
            "env.example",
            ".gitignore",
        }

    def test_index_holds_anchor_once(self, templates: TemplateGenerator) -> None:
        text = templates.generate_index()
        assert text.count(DEFAULT_ANCHOR_MARKER) == 1
        assert "app.use('/auth', authRoutes);" in text
        assert LEDGER_BEGIN not in text

    def test_ledger_index_wraps_anchor(self) -> None:
        tg = TemplateGenerator(GeneratorConfig(patch_strategy=PatchStrategy.LEDGER))
        lines = tg.generate_index().splitlines()
        idx = lines.index(DEFAULT_ANCHOR_MARKER)
        assert lines[idx - 1] == LEDGER_BEGIN
        assert lines[idx + 1] == LEDGER_END

    def test_custom_anchor(self) -> None:
        tg = TemplateGenerator(GeneratorConfig(anchor_marker="// routes go here"))
        assert "// routes go here" in tg.generate_index()

    def test_gitignore(self, templates: TemplateGenerator) -> None:
        assert templates.generate_gitignore() == "node_modules/\n.env\n"

    def test_env_example_keys(self, templates: TemplateGenerator) -> None:
        keys = [line.split("=")[0] for line in templates.generate_env_example().splitlines()]
        assert keys == ["PORT", "DB_HOST", "DB_USERNAME", "DB_PASSWORD", "DB_NAME", "APP_KEY"]


# ===========================================================================
# package.json
# ===========================================================================


class TestPackageManifest:

    @pytest.mark.parametrize(
        "folder, expected",
        [("my-api", "my-api"), ("My API", "my-api"), ("shop.v2", "shop.v2"), ("!!!", "app")],
    )
    def test_npm_package_name(self, folder: str, expected: str) -> None:
        assert TemplateGenerator.npm_package_name(folder) == expected

    def test_update_sets_main_scripts_and_deps(self, templates: TemplateGenerator) -> None:
        updated = templates.update_package_manifest(templates.new_package_manifest("demo"))
        assert updated["main"] == "src/index.js"
        assert updated["scripts"]["start"] == "node src/index.js"
        assert updated["scripts"]["dev"] == "nodemon src/index.js"
        assert updated["scripts"]["key:generate"] == "node src/config/key.js"
        assert "test" in updated["scripts"]
        for pkg in PACKAGE_DEPENDENCIES:
            assert pkg in updated["dependencies"]
        assert "nodemon" in updated["devDependencies"]

    def test_update_keeps_user_fields_and_versions(self, templates: TemplateGenerator) -> None:
        manifest: Dict[str, Any] = {
            "name": "shop",
            "private": True,
            "dependencies": {"express": "^5.0.0", "lodash": "^4.17.21"},
        }
        updated = templates.update_package_manifest(manifest)
        assert updated["private"] is True
        assert updated["dependencies"]["express"] == "^5.0.0"
        assert updated["dependencies"]["lodash"] == "^4.17.21"
        assert "dependencies" in manifest and "mysql2" not in manifest["dependencies"]

    def test_update_is_idempotent(self, templates: TemplateGenerator) -> None:
        once = templates.update_package_manifest({"name": "x"})
        assert templates.update_package_manifest(once) == once
