"""Unit tests for artifact emission (go_scaffold.codegen.core.generator and styles).

Tests cover:
- Column plans: order, length and per-style expressions
- Column-order alignment inside every generated repository
- Flat emission of a Product entity (records, repository, service, handler)
- Layered emission of a Product entity (entity, contract, use cases, handler)
- Conditional time imports
- Module files carrying the marker comments
- The template engine and its filters
"""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from go_scaffold.codegen.collector import parse_fields
from go_scaffold.codegen.core.config import ScaffoldConfig
from go_scaffold.codegen.core.generator import (
    MARKER_IMPORTS,
    MARKER_MODULE_FIELDS,
    MARKER_MODULE_VALUES,
    MARKER_ROUTES,
    MARKER_WIRING,
    ArtifactKind,
    GeneratorError,
)
from go_scaffold.codegen.core.schema import EntityDescriptor, ModuleDescriptor
from go_scaffold.codegen.core.templates import TemplateEngine, TemplateError, comma_list
from go_scaffold.codegen.styles.flat import FlatTemplateSet
from go_scaffold.codegen.styles.layered import USE_CASE_OPERATIONS, LayeredTemplateSet

MODULE_PATH = "github.com/acme/shop"


def make_entity(name: str = "Product", *tokens: str) -> EntityDescriptor:
    tokens = tokens or ("name:VARCHAR(255)", "price:DECIMAL(10,2)")
    return EntityDescriptor.create(name, parse_fields(tokens))


def by_label(files):
    return {generated.label: generated for generated in files}


def call_args(content: str, method: str, call: str) -> list[str]:
    """Arguments of the first multi-line ``call`` inside ``method``, in order."""
    body = content[content.index(method):]
    start = body.index(call) + len(call)
    block = body[start:body.index(")\n", start)]
    return [line.strip().rstrip(",") for line in block.splitlines() if line.strip()]


def sql_columns(content: str, method: str, keyword: str) -> list[str]:
    body = content[content.index(method):]
    if keyword == "SELECT":
        match = re.search(r"SELECT (.+?)\n", body)
        return [column.strip() for column in match.group(1).split(",")]
    match = re.search(r"INSERT INTO \w+ \((.+?)\)", body)
    return [column.strip() for column in match.group(1).split(",")]


@pytest.fixture
def flat() -> FlatTemplateSet:
    return FlatTemplateSet(ScaffoldConfig())


@pytest.fixture
def layered() -> LayeredTemplateSet:
    return LayeredTemplateSet(ScaffoldConfig())


@pytest.fixture
def flat_module() -> ModuleDescriptor:
    return ModuleDescriptor("product", MODULE_PATH, "flat")


@pytest.fixture
def layered_module() -> ModuleDescriptor:
    return ModuleDescriptor("catalog", MODULE_PATH, "layered")


# ---------------------------------------------------------------------------
# Column plans
# ---------------------------------------------------------------------------


class TestColumnPlan:
    def test_flat_plan(self, flat):
        plan = flat.column_plan(make_entity())
        assert plan.table == "products"
        assert plan.columns == ["id", "name", "price", "created_at", "updated_at"]
        assert plan.values == [
            "entity.ID",
            "entity.Name",
            "entity.Price",
            "entity.CreatedAt",
            "entity.UpdatedAt",
        ]
        assert plan.scans == [
            "&entity.ID",
            "&entity.Name",
            "&entity.Price",
            "&entity.CreatedAt",
            "&entity.UpdatedAt",
        ]

    def test_layered_plan(self, layered):
        plan = layered.column_plan(make_entity())
        assert plan.values[:3] == ["entity.GetId()", "entity.GetName()", "entity.GetPrice()"]
        assert plan.scans[:3] == ["&dbEntity.Id", "&dbEntity.Name", "&dbEntity.Price"]

    def test_declared_prefix_has_n_plus_one_entries(self, flat):
        entity = make_entity("Order", "total:DECIMAL(10,2)", "status:VARCHAR(20)", "paid:BOOLEAN")
        plan = flat.column_plan(entity)
        n = len(entity.fields)
        assert len(plan.columns) == len(plan.values) == len(plan.scans) == n + 3
        assert plan.columns[: n + 1] == ["id", "total", "status", "paid"]
        assert [binding.column for binding in plan.declared] == ["total", "status", "paid"]

    def test_update_assignments(self, flat):
        plan = flat.column_plan(make_entity())
        assert plan.assignments == ["name = ?", "price = ?", "updated_at = ?"]
        assert plan.identifier.value == "entity.ID"

    def test_table_suffix(self):
        entity = EntityDescriptor.create(
            "OrderItem", parse_fields(["qty:INT"]), table_suffix=""
        )
        assert entity.table_name == "order_item"
        assert entity.route_path == "/order_item"


# ---------------------------------------------------------------------------
# Flat style
# ---------------------------------------------------------------------------


class TestFlatEmission:
    def test_entity_files(self, flat, flat_module, tmp_path: Path):
        files = flat.emit(make_entity(), flat_module, tmp_path)
        paths = sorted(str(f.path.relative_to(tmp_path)) for f in files)
        assert paths == [
            "controllers/product_controller.go",
            "models/product.go",
            "repositories/product_repository.go",
            "services/product_service.go",
        ]
        kinds = {f.kind for f in files}
        assert ArtifactKind.RECORD in kinds
        assert ArtifactKind.HTTP_HANDLER in kinds

    def test_record(self, flat, flat_module, tmp_path: Path):
        model = by_label(flat.emit(make_entity(), flat_module, tmp_path))["model"].content
        assert model.startswith("package models\n")
        assert 'import "time"' in model
        assert 'Name string `json:"name"`' in model
        assert 'Price float64 `json:"price"`' in model
        assert "CreatedAt time.Time" in model

    def test_repository_alignment(self, flat, flat_module, tmp_path: Path):
        repo = by_label(flat.emit(make_entity(), flat_module, tmp_path))["repository"].content
        columns = ["id", "name", "price", "created_at", "updated_at"]

        assert sql_columns(repo, "FindById", "SELECT") == columns
        assert sql_columns(repo, "FindAll", "SELECT") == columns
        assert sql_columns(repo, "Save", "INSERT") == columns
        assert "VALUES (?, ?, ?, ?, ?)" in repo

        scans = ["&entity.ID", "&entity.Name", "&entity.Price", "&entity.CreatedAt", "&entity.UpdatedAt"]
        assert call_args(repo, "FindById", "Scan(") == scans
        assert call_args(repo, "FindAll(limit", "rows.Scan(") == scans
        assert call_args(repo, ") Save(", "Exec(query,") == [s[1:] for s in scans]

    def test_repository_update(self, flat, flat_module, tmp_path: Path):
        repo = by_label(flat.emit(make_entity(), flat_module, tmp_path))["repository"].content
        assert "UPDATE products SET name = ?, price = ?, updated_at = ?" in repo
        assert call_args(repo, ") Update(", "Exec(query,") == [
            "entity.Name",
            "entity.Price",
            "entity.UpdatedAt",
            "entity.ID",
        ]

    def test_service_and_controller(self, flat, flat_module, tmp_path: Path):
        files = by_label(flat.emit(make_entity(), flat_module, tmp_path))
        service = files["service"].content
        controller = files["controller"].content

        for operation in ("CreateProduct(", "GetProduct(", "ListProducts(", "UpdateProduct(", "DeleteProduct("):
            assert f"func (s *ProductService) {operation}" in service
        assert "\tname string,\n\tprice float64,\n" in service
        assert f'"{MODULE_PATH}/internal/product/repositories"' in service

        for operation in ("Create", "Get", "List", "Update", "Delete"):
            assert f"func (c *ProductController) {operation}(ctx context.WebContext)" in controller
        assert '"time"' not in controller

    def test_controller_imports_time_for_temporal_fields(self, flat, flat_module, tmp_path: Path):
        entity = make_entity("Event", "title:VARCHAR(100)", "starts_at:DATETIME")
        controller = by_label(flat.emit(entity, flat_module, tmp_path))["controller"].content
        assert '"time"' in controller
        assert "StartsAt time.Time" in controller

    def test_override_to_time_type_imports_time(self, flat_module, tmp_path: Path):
        config = ScaffoldConfig(custom={"type_overrides": {"epoch": "time.Time"}})
        flat = FlatTemplateSet(config)
        entity = EntityDescriptor.create(
            "Event", parse_fields(["seen_at:EPOCH"], flat.type_mapper)
        )
        assert entity.has_temporal_field

        controller = by_label(flat.emit(entity, flat_module, tmp_path))["controller"].content
        assert '"time"' in controller
        assert "SeenAt time.Time" in controller

    def test_no_fields(self, flat, flat_module, tmp_path: Path):
        with pytest.raises(GeneratorError):
            flat.emit(EntityDescriptor.create("Empty", []), flat_module, tmp_path)

    def test_formatting(self, flat, flat_module, tmp_path: Path):
        for generated in flat.emit(make_entity(), flat_module, tmp_path):
            assert generated.content.endswith("}\n")
            assert "\n\n\n" not in generated.content
            assert not any(line != line.rstrip() for line in generated.content.splitlines())


class TestFlatModuleFiles:
    def test_module_and_routes(self, flat, flat_module, tmp_path: Path):
        files = {f.label: f.content for f in flat.emit_module(flat_module, tmp_path)}
        module_go = files["module.go"]
        routes_go = files["routes.go"]

        assert module_go.startswith("package product\n")
        assert "type ProductModule struct {" in module_go
        assert "func NewProductModule(db *sql.DB) *ProductModule {" in module_go
        for marker in (MARKER_IMPORTS, MARKER_MODULE_FIELDS, MARKER_WIRING, MARKER_MODULE_VALUES):
            assert marker in module_go

        assert "func RegisterRoutes(router *gin.Engine, module *ProductModule) {" in routes_go
        assert MARKER_ROUTES in routes_go

    def test_registration(self, flat, flat_module):
        reg = flat.registration(flat_module)
        assert reg.import_alias == "product"
        assert reg.import_path == f"{MODULE_PATH}/internal/product"
        assert reg.route_import_path == reg.import_path


# ---------------------------------------------------------------------------
# Layered style
# ---------------------------------------------------------------------------


class TestLayeredEmission:
    def test_entity_files(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        paths = sorted(str(f.path.relative_to(tmp_path)) for f in files)
        expected_use_cases = [
            f"core/application/usecases/{operation}_product.go"
            for operation in USE_CASE_OPERATIONS
        ]
        assert paths == sorted(
            [
                "core/domain/entities/product.go",
                "core/application/repositories/product_repository.go",
                "infra/repositories/product_mysql_repository.go",
                "infra/web/controllers/product_controller.go",
                *expected_use_cases,
            ]
        )

    def test_domain_entity(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        entity = next(f.content for f in files if f.kind == ArtifactKind.RECORD)

        assert "func NewProduct(\n\tname string,\n\tprice float64,\n) (*Product, error) {" in entity
        assert "func RestoreProduct(\n\tid string,\n\tname string,\n\tprice float64," in entity
        assert "func (e *Product) Validate() error {" in entity
        assert "func (e *Product) GetName() string {" in entity
        assert "func (e *Product) GetPrice() float64 {" in entity
        assert "func (e *Product) SetName(name string) {" in entity
        assert "func (e *Product) SetPrice(price float64) {" in entity
        assert entity.count("e.updatedAt = time.Now().UTC()") == 2

    def test_repository_contract(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        contract = next(f.content for f in files if f.kind == ArtifactKind.REPOSITORY_CONTRACT)
        methods = re.findall(r"^\t(\w+)\(", contract, re.MULTILINE)
        assert methods == ["Save", "FindById", "FindAll", "Count", "Update", "Delete"]

    def test_mysql_repository_alignment(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        repo = next(f.content for f in files if f.kind == ArtifactKind.REPOSITORY_IMPLEMENTATION)
        columns = ["id", "name", "price", "created_at", "updated_at"]
        scans = ["&dbEntity.Id", "&dbEntity.Name", "&dbEntity.Price", "&dbEntity.CreatedAt", "&dbEntity.UpdatedAt"]

        assert sql_columns(repo, ") Save(", "INSERT") == columns
        assert sql_columns(repo, "FindById", "SELECT") == columns
        assert call_args(repo, ") Save(", "Exec(query,") == [
            "entity.GetId()",
            "entity.GetName()",
            "entity.GetPrice()",
            "entity.GetCreatedAt()",
            "entity.GetUpdatedAt()",
        ]
        assert call_args(repo, "FindById", "Scan(") == scans
        assert call_args(repo, "FindAll(limit", "rows.Scan(") == scans
        assert call_args(repo, "mapToDomain(dbEntity productRow)", "RestoreProduct(") == [
            s[1:] for s in scans
        ]
        assert 'Price float64 `db:"price"`' in repo
        assert 'CreatedAt time.Time `db:"created_at"`' in repo

    def test_use_cases(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        use_cases = {
            f.path.name: f.content for f in files if f.kind == ArtifactKind.ORCHESTRATION_UNIT
        }
        assert len(use_cases) == 5
        for operation in ("Create", "Get", "List", "Update", "Delete"):
            content = use_cases[f"{operation.lower()}_product.go"]
            assert f"func New{operation}ProductUseCase(repo repositories.ProductRepository)" in content
            assert f"func (uc *{operation}ProductUseCase) Execute(" in content

        assert "dto.NewPaginationResponseDTO(input.Page, input.Limit, totalCount)" in use_cases["list_product.go"]
        assert '"time"' not in use_cases["create_product.go"]
        assert '"time"' not in use_cases["update_product.go"]
        assert '"time"' not in use_cases["delete_product.go"]
        assert '"time"' in use_cases["get_product.go"]

    def test_use_cases_import_time_for_temporal_fields(self, layered, layered_module, tmp_path: Path):
        entity = make_entity("Event", "starts_at:DATETIME")
        files = layered.emit(entity, layered_module, tmp_path)
        create = next(f.content for f in files if f.path.name == "create_event.go")
        assert '"time"' in create

    def test_controller(self, layered, layered_module, tmp_path: Path):
        files = layered.emit(make_entity(), layered_module, tmp_path)
        controller = next(f.content for f in files if f.kind == ArtifactKind.HTTP_HANDLER)
        for operation in ("Create", "Get", "List", "Update", "Delete"):
            assert f"func (c *ProductController) {operation}(ctx context.WebContext)" in controller
        assert "createUseCase *usecases.CreateProductUseCase," in controller


class TestLayeredModuleFiles:
    def test_module_files(self, layered, layered_module, tmp_path: Path):
        files = {f.path.relative_to(tmp_path).as_posix(): f.content for f in layered.emit_module(layered_module, tmp_path)}
        assert set(files) == {"infra/module.go", "infra/web/routes.go"}
        assert files["infra/module.go"].startswith("package infra\n")
        assert "type CatalogModule struct {" in files["infra/module.go"]
        assert files["infra/web/routes.go"].startswith("package web\n")
        assert f'"{MODULE_PATH}/internal/catalog/infra"' in files["infra/web/routes.go"]

    def test_registration(self, layered, layered_module):
        reg = layered.registration(layered_module)
        assert reg.import_alias == "catalogInfra"
        assert reg.import_path == f"{MODULE_PATH}/internal/catalog/infra"
        assert reg.route_alias == "catalogWeb"
        assert reg.route_import_path == f"{MODULE_PATH}/internal/catalog/infra/web"


# ---------------------------------------------------------------------------
# Patch targets
# ---------------------------------------------------------------------------


class TestEntityPatchTargets:
    def test_fragments_are_keyed_by_kind(self, flat):
        assert flat.fragment_templates() == {
            ArtifactKind.MODULE_WIRING_FRAGMENT: "wiring_fragment.go.j2",
            ArtifactKind.ROUTE_FRAGMENT: "route_fragment.go.j2",
        }

    def test_missing_fragment_template(self, flat_module, tmp_path: Path):
        class NoRoutes(FlatTemplateSet):
            def fragment_templates(self):
                templates = super().fragment_templates()
                del templates[ArtifactKind.ROUTE_FRAGMENT]
                return templates

        with pytest.raises(GeneratorError, match="route_fragment"):
            NoRoutes().entity_patch_targets(make_entity(), flat_module, tmp_path)

    def test_flat_targets(self, flat, flat_module, tmp_path: Path):
        targets = flat.entity_patch_targets(make_entity(), flat_module, tmp_path)
        assert len(targets) == 8
        assert {t.file_path.name for t in targets} == {"module.go", "routes.go"}

        wiring = next(t for t in targets if t.anchor == MARKER_WIRING)
        assert "productRepo := repositories.NewProductRepository(db)" in wiring.payload
        assert "productController := controllers.NewProductController(productService)" in wiring.payload

        routes = next(t for t in targets if t.anchor == MARKER_ROUTES)
        assert routes.payload.count("router.") == 5
        assert 'router.GET("/products/:id"' in routes.payload

    def test_layered_wiring_fragment(self, layered, layered_module, tmp_path: Path):
        targets = layered.entity_patch_targets(make_entity(), layered_module, tmp_path)
        wiring = next(t for t in targets if t.anchor == MARKER_WIRING)
        assert wiring.file_path == tmp_path / "infra" / "module.go"
        assert "productRepo := repositories.NewProductMySQLRepository(db)" in wiring.payload
        assert "createProductUC := usecases.NewCreateProductUseCase(productRepo)" in wiring.payload
        assert (
            "productController := controllers.NewProductController("
            "createProductUC, getProductUC, listProductUC, updateProductUC, deleteProductUC)"
        ) in wiring.payload

    def test_composition_targets(self, flat, flat_module, tmp_path: Path):
        targets = flat.composition_patch_targets(flat_module, tmp_path)
        payloads = [t.payload.strip() for t in targets]
        assert payloads == [
            f'product "{MODULE_PATH}/internal/product"',
            "ProductModule *product.ProductModule",
            "productModule := product.NewProductModule(db)",
            "ProductModule: productModule,",
            f'product "{MODULE_PATH}/internal/product"',
            "product.RegisterRoutes(router, c.ProductModule)",
        ]


# ---------------------------------------------------------------------------
# Template engine
# ---------------------------------------------------------------------------


class TestTemplateEngine:
    def test_comma_list(self):
        assert comma_list(["id", "name", 3]) == "id, name, 3"
        assert comma_list([]) == ""

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(TemplateError, match="not found"):
            TemplateEngine(tmp_path / "absent")

    def test_undefined_variable_is_an_error(self, tmp_path: Path):
        (tmp_path / "broken.go.j2").write_text("package {{ nope }}\n", encoding="utf-8")
        with pytest.raises(TemplateError, match="broken.go.j2"):
            TemplateEngine(tmp_path).render_template("broken.go.j2", {})

    def test_renders_style_templates(self, tmp_path: Path):
        (tmp_path / "list.go.j2").write_text(
            "// {{ columns | comma_list }}\n", encoding="utf-8"
        )
        engine = TemplateEngine(tmp_path)
        assert engine.render_template("list.go.j2", {"columns": ["a", "b"]}) == "// a, b\n"
