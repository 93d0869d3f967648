# File: expressgen/templates.py
"""
ExpressGen - Code Template Engine
===================================
Pure-Python code generation engine for the Express + MySQL target.

This module turns ``IdentifierForms`` and ``GeneratorConfig`` objects into
JavaScript source strings for:
    1. Resource routes      (``src/routes/<slug>Routes.js``)
    2. Resource controllers (``src/controller/<slug>Controller.js``)
    3. Resource models      (``src/models/<slug>Models.js``)
    4. The project skeleton (entry point, DB pool, key rotator, JWT
       middleware, auth controller/routes, env template, ignore file)
    5. The ``package.json`` edit

**Consistency contract:**
    - Every cross-file name (controller symbol, model symbol, handler
      names, route parameter) comes from ``IdentifierForms``, never from
      ad-hoc string building, so the three resource files always agree.
    - All string assembly uses ``List[str]`` + ``"\\n".join()``.
    - Template methods are stateless; the same input gives byte-identical
      output.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from expressgen.models import (
    GeneratorConfig,
    IdentifierForms,
    PatchStrategy,
    RESOURCE_FILE_LAYOUT,
    ResourceSchema,
)
from expressgen.patcher import LEDGER_BEGIN, LEDGER_END

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("expressgen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "
_DOUBLE_INDENT: str = _INDENT * 2

MIDDLEWARE_NAME: str = "verifyToken"
MIDDLEWARE_REQUIRE: str = "../middleware/jwtMiddleware"

# Directories created under src/ by the scaffolder
SCAFFOLD_DIRECTORIES: Tuple[str, ...] = (
    "controller",
    "middleware",
    "models",
    "routes",
    "config",
)

# Runtime dependencies recorded in package.json (installed by the user)
PACKAGE_DEPENDENCIES: Dict[str, str] = {
    "bcryptjs": "^2.4.3",
    "dotenv": "^16.4.5",
    "express": "^4.19.2",
    "jsonwebtoken": "^9.0.2",
    "mysql2": "^3.9.7",
}
PACKAGE_DEV_DEPENDENCIES: Dict[str, str] = {
    "nodemon": "^3.1.0",
}

_NPM_NAME_RE: re.Pattern[str] = re.compile(r"[^a-z0-9._-]+")


def _finish(lines: List[str]) -> str:
    """Join lines into file content with exactly one trailing newline."""
    return "\n".join(lines).rstrip("\n") + "\n"


class TemplateGenerator:
    """
    Stateless code-generation engine.

    Each ``generate_*`` method returns a complete file content string.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        logger.debug(
            "TemplateGenerator initialised (src_dir=%s, strategy=%s).",
            self._config.src_dir,
            self._config.patch_strategy,
        )

    # ===================================================================
    # 1. Resource route
    # ===================================================================

    def generate_route(self, forms: IdentifierForms, protected: bool) -> str:
        """
        Generate the Express router for one resource.

        When *protected* is True the JWT middleware is required and passed
        as the first handler of every registration.
        """
        ctrl: str = forms.controller_name
        sym: str = forms.symbol
        guard: str = f"{MIDDLEWARE_NAME}, " if protected else ""

        lines: List[str] = []
        lines.append("const express = require('express');")
        lines.append(
            f"const {ctrl} = require('../controller/{forms.file_name('controller')}');"
        )
        if protected:
            lines.append(f"const {MIDDLEWARE_NAME} = require('{MIDDLEWARE_REQUIRE}');")
        lines.append("")
        lines.append("const router = express.Router();")
        lines.append("")
        lines.append(f"router.post('/', {guard}{ctrl}.createNew{sym});")
        lines.append(f"router.get('/', {guard}{ctrl}.getAll{sym});")
        lines.append(f"router.patch('/:{forms.id_param}', {guard}{ctrl}.update{sym});")
        lines.append(f"router.delete('/:{forms.id_param}', {guard}{ctrl}.delete{sym});")
        lines.append("")
        lines.append("module.exports = router;")
        return _finish(lines)

    # ===================================================================
    # 2. Resource controller
    # ===================================================================

    def generate_controller(self, forms: IdentifierForms) -> str:
        """
        Generate the controller: four async handlers that call the model
        and wrap the result in ``{message, data}``.  Any thrown error is
        answered with ``500 {message: 'Server Error', error}``.
        """
        sym: str = forms.symbol
        model: str = forms.model_name
        id_param: str = forms.id_param
        i1: str = _INDENT
        i2: str = _DOUBLE_INDENT

        def _catch() -> List[str]:
            return [
                f"{i1}}} catch (error) {{",
                f"{i2}res.status(500).json({{ message: 'Server Error', error }})",
                f"{i1}}}",
                "}",
                "",
            ]

        lines: List[str] = []
        lines.append(f"const {model} = require('../models/{forms.module_name('model')}');")
        lines.append("")

        # --- LIST ---
        lines.append(f"const getAll{sym} = async (req, res) => {{")
        lines.append(f"{i1}try {{")
        lines.append(f"{i2}const [data] = await {model}.getAll{sym}();")
        lines.append(f"{i2}res.json({{ message: 'Success', data }})")
        lines.extend(_catch())

        # --- CREATE ---
        lines.append(f"const createNew{sym} = async (req, res) => {{")
        lines.append(f"{i1}const {{ body }} = req;")
        lines.append(f"{i1}try {{")
        lines.append(f"{i2}await {model}.createNew{sym}(body);")
        lines.append(f"{i2}res.status(201).json({{ message: 'Created', data: body }})")
        lines.extend(_catch())

        # --- UPDATE ---
        lines.append(f"const update{sym} = async (req, res) => {{")
        lines.append(f"{i1}const {{ {id_param} }} = req.params;")
        lines.append(f"{i1}const {{ body }} = req;")
        lines.append(f"{i1}try {{")
        lines.append(f"{i2}await {model}.update{sym}(body, {id_param});")
        lines.append(
            f"{i2}res.json({{ message: 'Updated', data: {{ id: {id_param}, ...body }} }})"
        )
        lines.extend(_catch())

        # --- DELETE ---
        lines.append(f"const delete{sym} = async (req, res) => {{")
        lines.append(f"{i1}const {{ {id_param} }} = req.params;")
        lines.append(f"{i1}try {{")
        lines.append(f"{i2}await {model}.delete{sym}({id_param});")
        lines.append(f"{i2}res.json({{ message: 'Deleted' }})")
        lines.extend(_catch())

        lines.extend(self._exports_block(sym))
        return _finish(lines)

    # ===================================================================
    # 3. Resource model
    # ===================================================================

    def generate_model(
        self,
        forms: IdentifierForms,
        schema: Optional[ResourceSchema] = None,
    ) -> str:
        """
        Generate the data-access module for table ``forms.table_name``.

        INSERT and UPDATE use the schema's column list (``name, email,
        address`` when none is given), always as ``?`` placeholders.
        """
        schema = schema or self._config.default_schema()
        sym: str = forms.symbol
        table: str = forms.table_name
        id_param: str = forms.id_param
        columns: List[str] = schema.columns
        i1: str = _INDENT
        i2: str = _DOUBLE_INDENT

        col_list: str = ", ".join(columns)
        placeholders: str = ", ".join("?" for _ in columns)
        assignments: str = ", ".join(f"{c}=?" for c in columns)
        body_values: str = ", ".join(f"body.{c}" for c in columns)

        lines: List[str] = []
        lines.append("const dbPool = require('../config/database');")
        lines.append("")
        lines.append(f"const getAll{sym} = () => {{")
        lines.append(f"{i1}return dbPool.execute('SELECT * FROM {table}');")
        lines.append("}")
        lines.append("")
        lines.append(f"const createNew{sym} = (body) => {{")
        lines.append(f"{i1}return dbPool.execute(")
        lines.append(f'{i2}"INSERT INTO {table} ({col_list}) VALUES ({placeholders})",')
        lines.append(f"{i2}[{body_values}]")
        lines.append(f"{i1});")
        lines.append("}")
        lines.append("")
        lines.append(f"const update{sym} = (body, {id_param}) => {{")
        lines.append(f"{i1}return dbPool.execute(")
        lines.append(f'{i2}"UPDATE {table} SET {assignments} WHERE id=?",')
        lines.append(f"{i2}[{body_values}, {id_param}]")
        lines.append(f"{i1});")
        lines.append("}")
        lines.append("")
        lines.append(f"const delete{sym} = ({id_param}) => {{")
        lines.append(
            f'{i1}return dbPool.execute("DELETE FROM {table} WHERE id=?", [{id_param}]);'
        )
        lines.append("}")
        lines.append("")
        lines.extend(self._exports_block(sym))
        return _finish(lines)

    @staticmethod
    def _exports_block(sym: str) -> List[str]:
        return [
            "module.exports = {",
            f"{_INDENT}getAll{sym},",
            f"{_INDENT}createNew{sym},",
            f"{_INDENT}update{sym},",
            f"{_INDENT}delete{sym},",
            "}",
        ]

    # ===================================================================
    # 4. Aggregate: all files for one resource
    # ===================================================================

    def resource_relative_path(self, forms: IdentifierForms, kind: str) -> str:
        """``src/<category>/<slug><Suffix>`` as a POSIX relative path."""
        category, _ = RESOURCE_FILE_LAYOUT[kind]
        return f"{self._config.src_dir}/{category}/{forms.file_name(kind)}"

    def generate_all_for_resource(
        self,
        forms: IdentifierForms,
        protected: bool,
        schema: Optional[ResourceSchema] = None,
    ) -> Dict[str, str]:
        """
        Generate the route/controller/model triad.

        Returns a dict of relative_path → file_content, in write order
        (route, controller, model).
        """
        result: Dict[str, str] = {
            self.resource_relative_path(forms, "route"): self.generate_route(
                forms, protected
            ),
            self.resource_relative_path(forms, "controller"): self.generate_controller(
                forms
            ),
            self.resource_relative_path(forms, "model"): self.generate_model(
                forms, schema
            ),
        }
        logger.debug(
            "Generated %d files for resource '%s' (protected=%s).",
            len(result),
            forms.slug,
            protected,
        )
        return result

    # ===================================================================
    # 5. Project skeleton
    # ===================================================================

    def generate_index(self) -> str:
        """Generate ``src/index.js`` with the route anchor in place."""
        anchor: str = self._config.anchor_marker
        lines: List[str] = []
        lines.append("require('dotenv').config()")
        lines.append("const PORT = process.env.PORT || 5000;")
        lines.append("const express = require('express');")
        lines.append("")
        lines.append("const app = express();")
        lines.append("app.use(express.json());")
        lines.append("")
        lines.append("// Auto routes")
        lines.append("const authRoutes = require('./routes/authRoutes');")
        lines.append("app.use('/auth', authRoutes);")
        lines.append("")
        if self._config.patch_strategy == PatchStrategy.LEDGER:
            lines.append(LEDGER_BEGIN)
            lines.append(anchor)
            lines.append(LEDGER_END)
        else:
            lines.append(anchor)
        lines.append("")
        lines.append("app.use((err, req, res, next) => {")
        lines.append(f"{_INDENT}res.json({{ message: err.message }})")
        lines.append("})")
        lines.append("")
        lines.append("app.listen(PORT, () => {")
        lines.append(f"{_INDENT}console.log(`Server running on port ${{PORT}}`);")
        lines.append("})")
        return _finish(lines)

    def generate_database_config(self) -> str:
        """Generate ``src/config/database.js`` (mysql2 promise pool)."""
        lines: List[str] = [
            'const mysql = require("mysql2");',
            "",
            "const dbPool = mysql.createPool({",
            "  host: process.env.DB_HOST,",
            "  user: process.env.DB_USERNAME,",
            "  password: process.env.DB_PASSWORD,",
            "  database: process.env.DB_NAME,",
            "});",
            "",
            "module.exports = dbPool.promise();",
        ]
        return _finish(lines)

    def generate_key_rotator(self) -> str:
        """Generate ``src/config/key.js``: writes a fresh APP_KEY into .env."""
        lines: List[str] = [
            'const fs = require("fs");',
            'const path = require("path");',
            'const crypto = require("crypto");',
            "",
            'const envPath = path.resolve(__dirname, "../../.env");',
            "",
            "function generateAppKey(length = 32) {",
            '  return crypto.randomBytes(length).toString("hex");',
            "}",
            "",
            "function replaceEnvKey(newKey) {",
            "  if (!fs.existsSync(envPath)) {",
            '    console.error(".env file not found!");',
            "    process.exit(1);",
            "  }",
            "",
            '  let envContent = fs.readFileSync(envPath, "utf-8");',
            "",
            '  if (envContent.includes("APP_KEY=")) {',
            '    envContent = envContent.replace(/APP_KEY=.*/g, `APP_KEY="${newKey}"`);',
            "  } else {",
            '    envContent += `\\nAPP_KEY="${newKey}"\\n`;',
            "  }",
            "",
            '  fs.writeFileSync(envPath, envContent, "utf-8");',
            '  console.log("APP_KEY updated!");',
            "}",
            "",
            "const newKey = generateAppKey(32);",
            "replaceEnvKey(newKey);",
        ]
        return _finish(lines)

    def generate_jwt_middleware(self) -> str:
        """Generate ``src/middleware/jwtMiddleware.js``."""
        i1: str = _INDENT
        i2: str = _DOUBLE_INDENT
        lines: List[str] = [
            'const jwt = require("jsonwebtoken");',
            "",
            f"function {MIDDLEWARE_NAME}(req, res, next) {{",
            f'{i1}const token = req.headers.authorization?.split(" ")[1];',
            "",
            f"{i1}if (!token) {{",
            f'{i2}return res.status(401).json({{ message: "Unauthorized: Token missing" }});',
            f"{i1}}}",
            "",
            f"{i1}try {{",
            f"{i2}const decoded = jwt.verify(token, process.env.APP_KEY);",
            f"{i2}req.user = decoded;",
            f"{i2}next();",
            f"{i1}}} catch (err) {{",
            f'{i2}return res.status(401).json({{ message: "Invalid token" }});',
            f"{i1}}}",
            "}",
            "",
            f"module.exports = {MIDDLEWARE_NAME};",
        ]
        return _finish(lines)

    def generate_auth_controller(self) -> str:
        """Generate ``src/controller/authController.js`` (register/login/logout)."""
        i1: str = _INDENT
        i2: str = _DOUBLE_INDENT
        lines: List[str] = [
            'const bcrypt = require("bcryptjs");',
            'const jwt = require("jsonwebtoken");',
            'const db = require("../config/database");',
            "",
            "async function register(req, res) {",
            f"{i1}const {{ name, email, password }} = req.body;",
            "",
            f"{i1}if (!name || !email || !password)",
            f'{i2}return res.status(400).json({{ message: "Missing fields" }});',
            "",
            f"{i1}const hashed = bcrypt.hashSync(password, 10);",
            "",
            f"{i1}await db.execute(",
            f'{i2}"INSERT INTO users (name, email, password) VALUES (?, ?, ?)",',
            f"{i2}[name, email, hashed]",
            f"{i1});",
            "",
            f'{i1}res.json({{ message: "Register success" }});',
            "}",
            "",
            "async function login(req, res) {",
            f"{i1}const {{ email, password }} = req.body;",
            "",
            f"{i1}const [rows] = await db.execute(",
            f'{i2}"SELECT * FROM users WHERE email = ? LIMIT 1",',
            f"{i2}[email]",
            f"{i1});",
            "",
            f"{i1}if (!rows.length)",
            f'{i2}return res.status(400).json({{ message: "Email not found" }});',
            "",
            f"{i1}const user = rows[0];",
            "",
            f"{i1}const valid = bcrypt.compareSync(password, user.password);",
            f'{i1}if (!valid) return res.status(400).json({{ message: "Wrong password" }});',
            "",
            f"{i1}const token = jwt.sign(",
            f"{i2}{{ id: user.id, email: user.email }},",
            f"{i2}process.env.APP_KEY,",
            f'{i2}{{ expiresIn: "1d" }}',
            f"{i1});",
            "",
            f'{i1}res.json({{ message: "Login success", token }});',
            "}",
            "",
            "function logout(req, res) {",
            f'{i1}res.json({{ message: "Logout success (client removes token)" }});',
            "}",
            "",
            "module.exports = { register, login, logout };",
        ]
        return _finish(lines)

    def generate_auth_routes(self) -> str:
        """Generate ``src/routes/authRoutes.js``."""
        lines: List[str] = [
            'const express = require("express");',
            'const Auth = require("../controller/authController");',
            "",
            "const router = express.Router();",
            "",
            'router.post("/login", Auth.login);',
            'router.post("/register", Auth.register);',
            'router.post("/logout", Auth.logout);',
            "",
            "module.exports = router;",
        ]
        return _finish(lines)

    def generate_env_example(self) -> str:
        """Generate ``env.example`` with placeholder values."""
        lines: List[str] = [
            'PORT="5000"',
            'DB_HOST="localhost"',
            'DB_USERNAME="root"',
            'DB_PASSWORD=""',
            'DB_NAME="mydb"',
            'APP_KEY="your_app_key_here"',
        ]
        return _finish(lines)

    def generate_gitignore(self) -> str:
        """Generate ``.gitignore`` for a Node project."""
        return _finish(["node_modules/", ".env"])

    def generate_scaffold_files(self) -> Dict[str, str]:
        """
        Generate every fixed skeleton file.

        Returns a dict of relative_path → file_content.
        """
        src: str = self._config.src_dir
        result: Dict[str, str] = {
            self._config.entry_point_relpath: self.generate_index(),
            f"{src}/config/database.js": self.generate_database_config(),
            f"{src}/config/key.js": self.generate_key_rotator(),
            f"{src}/middleware/jwtMiddleware.js": self.generate_jwt_middleware(),
            f"{src}/controller/authController.js": self.generate_auth_controller(),
            f"{src}/routes/authRoutes.js": self.generate_auth_routes(),
            "env.example": self.generate_env_example(),
            ".gitignore": self.generate_gitignore(),
        }
        logger.debug("Generated %d skeleton files.", len(result))
        return result

    # ===================================================================
    # 6. package.json
    # ===================================================================

    @staticmethod
    def npm_package_name(folder_name: str) -> str:
        """Folder name → npm package name, the way ``npm init -y`` does it."""
        name: str = _NPM_NAME_RE.sub("-", folder_name.lower()).strip("-.")
        return name or "app"

    def new_package_manifest(self, folder_name: str) -> Dict[str, Any]:
        """A fresh manifest equivalent to ``npm init -y``."""
        return {
            "name": self.npm_package_name(folder_name),
            "version": "1.0.0",
            "description": "",
            "main": "index.js",
            "scripts": {
                "test": 'echo "Error: no test specified" && exit 1',
            },
            "keywords": [],
            "author": "",
            "license": "ISC",
        }

    def update_package_manifest(self, manifest: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of *manifest* wired for the skeleton.

        Sets ``main`` and the start/dev/key:generate scripts, and adds any
        missing dependency without touching versions the user already pinned.
        Applying it twice gives the same result as applying it once.
        """
        entry: str = self._config.entry_point_relpath
        updated: Dict[str, Any] = copy.deepcopy(manifest)

        updated["main"] = entry

        scripts: Dict[str, str] = dict(updated.get("scripts") or {})
        scripts["start"] = f"node {entry}"
        scripts["dev"] = f"nodemon {entry}"
        scripts["key:generate"] = f"node {self._config.src_dir}/config/key.js"
        updated["scripts"] = scripts

        for section, wanted in (
            ("dependencies", PACKAGE_DEPENDENCIES),
            ("devDependencies", PACKAGE_DEV_DEPENDENCIES),
        ):
            current: Dict[str, str] = dict(updated.get(section) or {})
            for pkg, version in wanted.items():
                current.setdefault(pkg, version)
            updated[section] = dict(sorted(current.items()))

        return updated


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "SCAFFOLD_DIRECTORIES",
    "PACKAGE_DEPENDENCIES",
    "PACKAGE_DEV_DEPENDENCIES",
    "MIDDLEWARE_NAME",
]

logger.debug("expressgen.templates loaded.")
