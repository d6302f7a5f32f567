# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the static TypeScript semantic service."""

import re

from mangler.model import Definition
from mangler.typescript import TypeScriptProject


def _offsets(text: str, word: str) -> list[int]:
    return [match.start() for match in re.finditer(rf"\b{re.escape(word)}\b", text)]


def test_ph7_mgl_801_definitions_follow_named_imports() -> None:
    child = "import { Base } from './base';\nexport class Child extends Base {}\n"
    project = TypeScriptProject.from_sources(
        {"/p/base.ts": "export class Base {}\n", "/p/child.ts": child}
    )

    definitions = project.definitions_at("/p/child.ts", child.rindex("Base"))

    assert definitions == [Definition("/p/base.ts", 13)]


def test_ph7_mgl_802_definitions_follow_reexports_and_js_specifiers() -> None:
    consumer = (
        "import { Base } from './index.js';\n"
        "import * as lib from './index';\n"
        "class A extends Base {}\n"
        "class B extends lib.Base {}\n"
    )
    project = TypeScriptProject.from_sources(
        {
            "/p/base.ts": "export class Base {}\n",
            "/p/more.ts": "export * from './base';\n",
            "/p/index.ts": "export { Base } from './more';\n",
            "/p/consumer.ts": consumer,
        }
    )

    named = project.definitions_at("/p/consumer.ts", consumer.index("Base {}"))
    qualified = project.definitions_at("/p/consumer.ts", consumer.index("Base {}\n", consumer.index("lib.")))

    assert named == [Definition("/p/base.ts", 13)]
    assert qualified == [Definition("/p/base.ts", 13)]


def test_ph7_mgl_803_merged_declarations_are_ambiguous() -> None:
    shape = "export class Shape {}\nexport interface Shape { area(): number }\n"
    user = "import { Shape } from './shape';\nclass Circle extends Shape {}\n"
    project = TypeScriptProject.from_sources({"/p/shape.ts": shape, "/p/user.ts": user})

    definitions = project.definitions_at("/p/user.ts", user.rindex("Shape"))

    assert len(definitions) == 2


def test_ph7_mgl_804_unresolved_and_external_supertypes_have_no_definition() -> None:
    text = "import { Component } from 'framework';\nclass View extends Component {}\nclass Free extends Missing {}\n"
    project = TypeScriptProject.from_sources({"/p/view.ts": text})

    assert project.definitions_at("/p/view.ts", text.rindex("Component")) == []
    assert project.definitions_at("/p/view.ts", text.index("Missing")) == []


def test_ph7_mgl_805_member_rename_spans_owner_and_descendants() -> None:
    text = (
        "class Base {\n"
        "  protected count = 0;\n"
        "  bump(): void { this.count++; }\n"
        "}\n"
        "class Child extends Base {\n"
        "  protected count = 5;\n"
        "  read(): number { return this.count + this['count']; }\n"
        "}\n"
        "class Unrelated {\n"
        "  protected total = 0;\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/a.ts": text})
    child_decl = text.index("count = 5")

    locations = project.find_rename_locations("/p/a.ts", child_decl)

    assert [item.offset for item in locations] == _offsets(text, "count")
    assert all(item.length == 5 for item in locations)
    assert all(item.file_name == "/p/a.ts" for item in locations)


def test_ph7_mgl_806_arrow_callbacks_keep_the_class_this() -> None:
    text = (
        "class Box {\n"
        "  private size = 1;\n"
        "  grow(): void {\n"
        "    const items = [1];\n"
        "    items.forEach(() => this.size++);\n"
        "  }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/box.ts": text})

    locations = project.find_rename_locations("/p/box.ts", text.index("size"))

    assert [item.offset for item in locations] == _offsets(text, "size")


def test_ph7_mgl_807_parameter_properties_and_annotated_parameters() -> None:
    text = (
        "class Point {\n"
        "  constructor(private readonly x: number) {}\n"
        "  equals(other: Point): boolean { return this.x === other.x; }\n"
        "  static origin(): number { return Point.x; }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/point.ts": text})

    locations = project.find_rename_locations("/p/point.ts", text.index("x: number"))

    assert [item.offset for item in locations] == _offsets(text, "x")


def test_ph7_mgl_808_member_inherited_from_declaration_file_is_not_renamed() -> None:
    app = "import { Widget } from './lib';\nclass Button extends Widget {\n  protected render(): void {}\n}\n"
    project = TypeScriptProject.from_sources(
        {
            "/p/lib.d.ts": "export declare class Widget {\n  protected render(): void;\n}\n",
            "/p/app.ts": app,
        }
    )

    assert project.find_rename_locations("/p/app.ts", app.index("render")) == []


def test_ph7_mgl_809_top_level_rename_covers_importers() -> None:
    lib = (
        "export function compute(value: number): number {\n"
        "  return value * 2;\n"
        "}\n"
        "export const table = { compute };\n"
        "export { compute as calc };\n"
        "function other(compute: number): number { return compute; }\n"
    )
    main = (
        "import { compute } from './lib';\n"
        "import { compute as run } from './lib';\n"
        "import * as lib from './lib';\n"
        "export const total = compute(1) + run(2) + lib.compute(3);\n"
    )
    project = TypeScriptProject.from_sources({"/p/lib.ts": lib, "/p/main.ts": main})

    locations = project.find_rename_locations("/p/lib.ts", lib.index("compute"))

    lib_offsets = _offsets(lib, "compute")
    main_offsets = _offsets(main, "compute")
    by_file = {
        file_name: [(item.offset, item.prefix_text, item.suffix_text) for item in locations if item.file_name == file_name]
        for file_name in ("/p/lib.ts", "/p/main.ts")
    }
    assert by_file["/p/lib.ts"] == [
        (lib_offsets[0], "", ""),
        (lib_offsets[1], "compute: ", ""),
        (lib_offsets[2], "", ""),
    ]
    assert by_file["/p/main.ts"] == [(offset, "", "") for offset in main_offsets]
    assert "run" not in {main[item.offset : item.offset + item.length] for item in locations if item.file_name == "/p/main.ts"}


def test_ph7_mgl_810_local_export_list_keeps_exported_name() -> None:
    text = "const value = 1;\nexport { value };\nexport type Value = typeof value;\n"
    project = TypeScriptProject.from_sources({"/p/a.ts": text})

    locations = project.find_rename_locations("/p/a.ts", text.index("value"))

    assert [(item.offset, item.suffix_text) for item in locations] == [
        (_offsets(text, "value")[0], ""),
        (_offsets(text, "value")[1], " as value"),
        (_offsets(text, "value")[2], ""),
    ]


def test_ph7_mgl_811_rename_follows_star_reexports_and_qualified_types() -> None:
    model = "export class Model {}\n"
    barrel = "export * from './model';\n"
    user = (
        "import { Model } from './barrel';\n"
        "import * as ns from './barrel';\n"
        "let first: Model;\n"
        "let second: ns.Model;\n"
    )
    project = TypeScriptProject.from_sources(
        {"/p/model.ts": model, "/p/barrel.ts": barrel, "/p/user.ts": user}
    )

    locations = project.find_rename_locations("/p/model.ts", model.index("Model"))

    assert [(item.file_name, item.offset) for item in locations] == [
        ("/p/model.ts", 13),
        *[("/p/user.ts", offset) for offset in _offsets(user, "Model")],
    ]


def test_ph7_mgl_812_alias_definitions_and_identifiers() -> None:
    text = "export const Color = { red: 1 };\nexport type Color = number;\nconst other = Color.red;\n"
    project = TypeScriptProject.from_sources({"/p/color.ts": text})

    aliases = project.find_alias_definitions("/p/color.ts", text.index("Color"))
    identifiers = project.identifiers_in_file("/p/color.ts")

    assert aliases == [Definition("/p/color.ts", offset) for offset in _offsets(text, "Color")[:2]]
    assert {"Color", "red", "other"} <= identifiers
    assert project.identifiers_in_file("/p/missing.ts") == frozenset()


def test_ph7_mgl_813_program_files_are_sorted_and_flag_declarations() -> None:
    project = TypeScriptProject.from_sources(
        {"/p/z.ts": "export const z = 1;\n", "/p/a.d.ts": "export declare const a: number;\n"}
    )

    files = project.program_files()

    assert [source.file_name for source in files] == ["/p/a.d.ts", "/p/z.ts"]
    assert [source.is_declaration_file for source in files] == [True, False]


def test_ph7_mgl_814_unannotated_local_receiver_blocks_member_rename() -> None:
    text = (
        "class Link {\n"
        "  private weight = 1;\n"
        "  private next: Link | null = null;\n"
        "  total(): number {\n"
        "    const other = this.next;\n"
        "    return this.weight + other.weight;\n"
        "  }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/link.ts": text})

    assert project.find_rename_locations("/p/link.ts", text.index("weight")) == []


def test_ph7_mgl_815_callback_parameters_need_a_family_annotation() -> None:
    untyped = (
        "class Item {\n"
        "  private rank = 0;\n"
        "  static order(items: Item[]): Item[] {\n"
        "    return items.sort((a, b) => a.rank - b.rank);\n"
        "  }\n"
        "}\n"
    )
    typed = untyped.replace("(a, b)", "(a: Item, b: Item)")
    project = TypeScriptProject.from_sources({"/p/untyped.ts": untyped, "/p/typed.ts": typed})

    blocked = project.find_rename_locations("/p/untyped.ts", untyped.index("rank"))
    renamed = project.find_rename_locations("/p/typed.ts", typed.index("rank"))

    assert blocked == []
    assert [item.offset for item in renamed] == _offsets(typed, "rank")


def test_ph7_mgl_816_plain_function_this_blocks_member_rename() -> None:
    text = (
        "class Box {\n"
        "  private size = 1;\n"
        "  grow(): void {\n"
        "    function inner() { return this.size; }\n"
        "    this.size++;\n"
        "  }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/box.ts": text})

    assert project.find_rename_locations("/p/box.ts", text.index("size")) == []


def test_ph7_mgl_817_object_literal_methods_bind_their_own_this() -> None:
    text = (
        "class A {\n"
        "  private x = 1;\n"
        "  m() { return { x: 2, get() { return this.x; } }; }\n"
        "  read() { return this.x; }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/a.ts": text})

    locations = project.find_rename_locations("/p/a.ts", text.index("x = 1"))

    offsets = _offsets(text, "x")
    assert [item.offset for item in locations] == [offsets[0], offsets[3]]


def test_ph7_mgl_818_class_expression_bound_to_const_links_subclasses() -> None:
    text = (
        "const Base = class { protected size = 1; };\n"
        "class Child extends Base {\n"
        "  get big(): number { return this.size * 2; }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/a.ts": text})

    definitions = project.definitions_at("/p/a.ts", text.rindex("Base"))
    locations = project.find_rename_locations("/p/a.ts", text.index("size"))

    assert definitions == [Definition("/p/a.ts", text.index("Base"))]
    assert [item.offset for item in locations] == _offsets(text, "size")


def test_ph7_mgl_819_unresolved_supertypes_block_protected_renames() -> None:
    mixin = (
        "class Base {\n"
        "  protected size = 1;\n"
        "  private id = 0;\n"
        "  key(): number { return this.id; }\n"
        "}\n"
        "function Mixin<T>(base: T): T { return base; }\n"
        "class Child extends Mixin(Base) {\n"
        "  get big(): number { return this.size * 2; }\n"
        "}\n"
    )
    view = (
        "import { Component } from 'framework';\n"
        "class View extends Component {\n"
        "  protected render(): void {}\n"
        "  private state = 0;\n"
        "  update(): void { this.render(); this.state++; }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources({"/p/mixin.ts": mixin, "/p/view.ts": view})

    assert project.find_rename_locations("/p/mixin.ts", mixin.index("size")) == []
    assert project.find_rename_locations("/p/view.ts", view.index("render")) == []
    private_id = project.find_rename_locations("/p/mixin.ts", mixin.index("id = 0"))
    private_state = project.find_rename_locations("/p/view.ts", view.index("state"))
    assert [item.offset for item in private_id] == _offsets(mixin, "id")
    assert [item.offset for item in private_state] == _offsets(view, "state")


def test_ph7_mgl_820_destructuring_and_untyped_importers_block_member_rename() -> None:
    box = (
        "export class Box {\n"
        "  protected size = 1;\n"
        "  read(): number { const { size } = this; return size; }\n"
        "}\n"
    )
    counter = "export class Counter {\n  protected count = 0;\n}\n"
    user = (
        "import { Counter } from './counter';\n"
        "export function peek(value: any): number { return value.count; }\n"
    )
    project = TypeScriptProject.from_sources(
        {"/p/box.ts": box, "/p/counter.ts": counter, "/p/user.ts": user}
    )

    assert project.find_rename_locations("/p/box.ts", box.index("size")) == []
    assert project.find_rename_locations("/p/counter.ts", counter.index("count")) == []


def test_ph7_mgl_821_receivers_known_to_be_foreign_do_not_block() -> None:
    text = (
        "import * as util from './util';\n"
        "class Cache {\n"
        "  private size = 0;\n"
        "  measure(index: Map<string, number>): number {\n"
        "    return this.size + index.size + Math.size + util.size;\n"
        "  }\n"
        "}\n"
    )
    project = TypeScriptProject.from_sources(
        {"/p/cache.ts": text, "/p/util.ts": "export const size = 1;\n"}
    )

    locations = project.find_rename_locations("/p/cache.ts", text.index("size"))

    offsets = _offsets(text, "size")
    assert [item.offset for item in locations] == offsets[:2]
