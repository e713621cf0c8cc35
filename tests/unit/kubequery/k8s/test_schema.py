#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from typing import Annotated

import pytest
from kubernetes import client
from pydantic import BaseModel

from tests.unit.kubequery.k8s.row_models import First, Sample

from kubequery.exceptions import SchemaError
from kubequery.k8s.fields import RowModel, Text
from kubequery.k8s.schema import (
    Column,
    ColumnType,
    get_schema,
    is_row_model,
    projection_plan,
    snake_case,
    TaggedUnion,
)


def test_schema_follows_declaration_order() -> None:
    assert get_schema(Sample) == (
        Column("name", ColumnType.TEXT),
        Column("count", ColumnType.INTEGER),
        Column("big", ColumnType.BIGINT),
        Column("flag", ColumnType.INTEGER),
        Column("maybe", ColumnType.INTEGER),
        Column("mode", ColumnType.TEXT),
        Column("when", ColumnType.BIGINT),
        Column("took", ColumnType.TEXT),
        Column("size", ColumnType.TEXT),
        Column("blob", ColumnType.TEXT),
        Column("items", ColumnType.TEXT),
        Column("tags", ColumnType.TEXT),
        Column("selector", ColumnType.TEXT),
        Column("anything", ColumnType.TEXT),
        Column("inner_text", ColumnType.TEXT),
        Column("inner_count", ColumnType.INTEGER),
        Column("choice_type", ColumnType.TEXT),
        Column("first_path", ColumnType.TEXT),
        Column("first_read_only", ColumnType.INTEGER),
        Column("second_server", ColumnType.TEXT),
    )


def test_schema_is_computed_once() -> None:
    assert projection_plan(Sample) is projection_plan(Sample)
    assert get_schema(Sample) == get_schema(Sample)


def test_duplicate_column_is_rejected() -> None:
    class Meta(RowModel):
        name: Text = ""

    class Clashing(RowModel):
        meta: Meta
        name: Text = ""

    with pytest.raises(SchemaError, match="Duplicate column 'name'"):
        get_schema(Clashing)


def test_untagged_union_is_rejected() -> None:
    class Untagged(RowModel):
        value: int | str = 0

    with pytest.raises(SchemaError):
        get_schema(Untagged)


def test_union_variant_without_tag_is_rejected() -> None:
    class NoTag(RowModel):
        path: Text = ""

    class Broken(RowModel):
        source: Annotated[First | NoTag | None, TaggedUnion("source_type")] = None

    with pytest.raises(SchemaError, match="not a tagged row model"):
        get_schema(Broken)


def test_non_row_model_is_rejected() -> None:
    with pytest.raises(SchemaError):
        get_schema(client.V1LabelSelector)  # type: ignore[arg-type]


class _Selector(BaseModel):
    match_labels: dict[str, str] | None = None
    match_expressions: list[str] | None = None


def test_other_pydantic_model_is_one_column() -> None:
    class WithSelector(RowModel):
        name: Text = ""
        selector: _Selector | None = None

    assert get_schema(WithSelector) == [
        Column("name", ColumnType.TEXT),
        Column("selector", ColumnType.TEXT),
    ]


def test_only_row_models_are_embedded() -> None:
    assert is_row_model(First)
    assert not is_row_model(_Selector)
    assert not is_row_model(client.V1LabelSelector)
    with pytest.raises(SchemaError):
        get_schema(_Selector)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("hostPath", "host_path"),
        ("ScaleIO", "scale_io"),
        ("awsElasticBlockStore", "aws_elastic_block_store"),
        ("daemon_set_name", "daemon_set_name"),
    ],
)
def test_snake_case(name: str, expected: str) -> None:
    assert snake_case(name) == expected
