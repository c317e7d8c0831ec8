# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the dependency resolver.
"""
import pytest
from devenv.RUNNERS.dependency_resolver import DependencyResolver, parse_dependency
from devenv.errors import (
    CircularDependencyError,
    DependencyError,
    DependencyFormatError,
    UnknownServiceError,
)


class TestParseDependency:
    """Tests for constraint parsing."""

    def test_simple(self):
        assert parse_dependency("aws -> kubernetes") == ("aws", "kubernetes")

    def test_surrounding_whitespace_is_trimmed(self):
        assert parse_dependency("  aws   ->   gcp \t") == ("aws", "gcp")

    @pytest.mark.parametrize("dep", [
        "invalid",
        "aws->gcp",
        "aws -> ",
        " -> gcp",
        "a -> b -> c",
        "",
    ])
    def test_malformed(self, dep):
        with pytest.raises(DependencyFormatError) as exc:
            parse_dependency(dep)
        assert "invalid dependency format" in str(exc.value)


class TestResolve:
    """Tests for level resolution."""

    def test_no_dependencies_single_sorted_level(self):
        groups = DependencyResolver({"kubernetes", "aws", "gcp"}, []).resolve()
        assert len(groups) == 1
        assert groups[0].level == 0
        assert groups[0].services == ["aws", "gcp", "kubernetes"]

    def test_empty(self):
        assert DependencyResolver([], []).resolve() == []

    def test_linear_chain(self):
        resolver = DependencyResolver(["aws", "gcp", "kubernetes"], ["aws -> gcp", "gcp -> kubernetes"])
        groups = resolver.resolve()
        assert [g.services for g in groups] == [["aws"], ["gcp"], ["kubernetes"]]
        assert [g.level for g in groups] == [0, 1, 2]

    def test_shared_dependency(self):
        groups = DependencyResolver(
            ["base", "service1", "service2"],
            ["base -> service1", "base -> service2"],
        ).resolve()
        assert [g.services for g in groups] == [["base"], ["service1", "service2"]]

    def test_diamond(self):
        resolver = DependencyResolver(["A", "B", "C", "D"], ["A -> B", "A -> C", "B -> D", "C -> D"])
        groups = resolver.resolve()
        assert len(groups) == 3
        assert groups[0].services == ["A"]
        assert set(groups[1].services) == {"B", "C"}
        assert groups[2].services == ["D"]

        order = resolver.execution_order()
        assert order.index("A") < order.index("B")
        assert order.index("A") < order.index("C")
        assert order.index("B") < order.index("D")
        assert order.index("C") < order.index("D")

    def test_accepts_mapping_keys(self):
        groups = DependencyResolver({"aws": object(), "gcp": object()}, ["gcp -> aws"]).resolve()
        assert [g.services for g in groups] == [["gcp"], ["aws"]]

    def test_duplicate_constraint(self):
        groups = DependencyResolver(["a", "b"], ["a -> b", "a -> b"]).resolve()
        assert [g.services for g in groups] == [["a"], ["b"]]

    def test_unknown_source(self):
        with pytest.raises(UnknownServiceError) as exc:
            DependencyResolver(["gcp"], ["aws -> gcp"]).resolve()
        assert "source service 'aws'" in str(exc.value)

    def test_unknown_target(self):
        with pytest.raises(UnknownServiceError) as exc:
            DependencyResolver(["aws"], ["aws -> gcp"]).resolve()
        assert "target service 'gcp'" in str(exc.value)

    def test_cycle(self):
        with pytest.raises(CircularDependencyError) as exc:
            DependencyResolver(["aws", "gcp"], ["aws -> gcp", "gcp -> aws"]).resolve()
        assert "circular" in str(exc.value)

    def test_self_dependency(self):
        with pytest.raises(CircularDependencyError) as exc:
            DependencyResolver(["aws"], ["aws -> aws"]).resolve()
        assert "aws -> aws" in str(exc.value)

    def test_cycle_behind_acyclic_prefix(self):
        with pytest.raises(CircularDependencyError):
            DependencyResolver(
                ["a", "b", "c", "d"],
                ["a -> b", "b -> c", "c -> d", "d -> b"],
            ).resolve()

    def test_errors_share_base_class(self):
        with pytest.raises(DependencyError):
            DependencyResolver(["a"], ["nonsense"]).resolve()

    def test_long_chain_does_not_recurse(self):
        names = [f"s{i:05d}" for i in range(1500)]
        deps = [f"{a} -> {b}" for a, b in zip(names, names[1:])]
        order = DependencyResolver(names, deps).execution_order()
        assert order == names


class TestDerivedViews:
    """Tests for execution_order, parallel_groups and validate."""

    def test_execution_order_concatenates_levels(self):
        resolver = DependencyResolver(["aws", "docker", "kubernetes"], ["aws -> kubernetes"])
        assert resolver.execution_order() == ["aws", "docker", "kubernetes"]

    def test_parallel_groups_equal_resolve(self):
        resolver = DependencyResolver(["a", "b", "c"], ["a -> c"])
        assert resolver.parallel_groups() == resolver.resolve()

    def test_errors_propagate(self):
        resolver = DependencyResolver(["a", "b"], ["a -> b", "b -> a"])
        with pytest.raises(CircularDependencyError):
            resolver.execution_order()
        with pytest.raises(CircularDependencyError):
            resolver.validate()

    def test_input_not_mutated(self):
        services = ["b", "a"]
        deps = ["a -> b"]
        resolver = DependencyResolver(services, deps)
        resolver.resolve()
        resolver.resolve()
        assert services == ["b", "a"]
        assert deps == ["a -> b"]
        assert resolver.execution_order() == ["a", "b"]
