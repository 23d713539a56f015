# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Unit tests for entity tables and name resolution."""

import unittest

from multiplant import (
    AmbiguousNameError,
    Body,
    DuplicateEntityNameError,
    EntityKind,
    ErrorKind,
    NotFoundError,
    PlantError,
    scoped_name,
    split_scoped_name,
)
from multiplant._src.sim.tables import EntityTable, NameIndex

###
# Tests
###


class TestNameIndex(unittest.TestCase):
    def test_add_and_find(self):
        index = NameIndex()
        index.add("link", 2, 0)
        index.add("link", 3, 1)
        index.add("other", 2, 2)

        self.assertEqual(len(index), 3)
        self.assertIn((2, "link"), index)
        self.assertNotIn((4, "link"), index)
        self.assertEqual(index.find("link", 3), 1)
        self.assertIsNone(index.find("link", 4))
        self.assertEqual(index.instances("link"), [2, 3])
        self.assertEqual(index.count("link"), 2)
        self.assertEqual(index.count("missing"), 0)
        self.assertEqual(index.names(2), ["link", "other"])
        self.assertEqual(index.names(5), [])


class TestEntityTable(unittest.TestCase):
    def setUp(self):
        names = {2: "A", 3: "B"}
        self.table = EntityTable(EntityKind.BODY, Body, names.get)

    def test_insert_assigns_sequential_indices(self):
        b0 = self.table.insert("X", 2)
        b1 = self.table.insert("Y", 2)
        b2 = self.table.insert("X", 3)
        self.assertEqual([b0.index, b1.index, b2.index], [0, 1, 2])
        self.assertEqual(len(self.table), 3)
        self.assertEqual(list(self.table), [b0, b1, b2])
        self.assertIs(self.table[1], b1)
        self.assertEqual(b2.model_instance, 3)
        self.assertEqual(self.table.kind, EntityKind.BODY)

    def test_duplicate_name_in_same_instance(self):
        self.table.insert("X", 2)
        with self.assertRaises(DuplicateEntityNameError) as cm:
            self.table.insert("X", 2)
        self.assertEqual(cm.exception.kind, ErrorKind.DUPLICATE_ENTITY_NAME)
        self.assertEqual(cm.exception.name, "X")
        self.assertEqual(cm.exception.model_instance, "A")
        self.assertIn("already contains a body named 'X'", str(cm.exception))
        # The failed insertion does not consume an index
        self.assertEqual(self.table.insert("Y", 2).index, 1)

    def test_unscoped_lookup(self):
        self.assertFalse(self.table.has("X"))
        x = self.table.insert("X", 2)
        self.assertTrue(self.table.has("X"))
        self.assertIs(self.table.get_by_name("X"), x)
        with self.assertRaises(NotFoundError):
            self.table.get_by_name("missing")

    def test_ambiguous_lookup(self):
        a = self.table.insert("X", 2)
        b = self.table.insert("X", 3)

        with self.assertRaises(AmbiguousNameError) as cm:
            self.table.has("X")
        self.assertEqual(cm.exception.entity_kind, EntityKind.BODY)
        self.assertEqual(cm.exception.model_instances, ["A", "B"])
        self.assertTrue(str(cm.exception).startswith("Body X appears in multiple model instances."))

        with self.assertRaises(AmbiguousNameError):
            self.table.get_by_name("X")
        # Ambiguity errors are lookup errors
        with self.assertRaises(LookupError):
            self.table.get_by_name("X")

        self.assertTrue(self.table.has("X", 2))
        self.assertTrue(self.table.has("X", 3))
        self.assertFalse(self.table.has("X", 4))
        self.assertIs(self.table.get_by_name("X", 2), a)
        self.assertIs(self.table.get_by_name("X", 3), b)
        self.assertNotEqual(a.index, b.index)

    def test_scoped_not_found(self):
        self.table.insert("X", 2)
        with self.assertRaises(NotFoundError) as cm:
            self.table.get_by_name("X", 3)
        self.assertIsInstance(cm.exception, PlantError)
        self.assertEqual(cm.exception.kind, ErrorKind.NOT_FOUND)
        self.assertIn("model instance 'B'", str(cm.exception))

    def test_get_out_of_range(self):
        self.table.insert("X", 2)
        with self.assertRaises(NotFoundError):
            self.table.get(1)
        with self.assertRaises(NotFoundError):
            self.table.get(-1)

    def test_aliases(self):
        x = self.table.insert("X", 3)
        alias = self.table.add_alias("sub::X", 2, x.index)
        self.assertIs(alias, x)

        # Aliases resolve to the original entity but do not create entities
        self.assertEqual(len(self.table), 1)
        self.assertIs(self.table.get_by_name("sub::X", 2), x)
        self.assertEqual(self.table.get_by_name("sub::X", 2).model_instance, 3)
        self.assertEqual(self.table.names(2), ["sub::X"])
        self.assertEqual(self.table.instances_with_name("sub::X"), [2])

        with self.assertRaises(DuplicateEntityNameError):
            self.table.add_alias("sub::X", 2, x.index)
        with self.assertRaises(DuplicateEntityNameError):
            self.table.insert("sub::X", 2)
        with self.assertRaises(NotFoundError):
            self.table.add_alias("Y", 2, 7)

    def test_format_without_instance_names(self):
        table = EntityTable(EntityKind.JOINT_ACTUATOR, Body)
        table.insert("X", 5)
        with self.assertRaises(DuplicateEntityNameError) as cm:
            table.insert("X", 5)
        self.assertEqual(cm.exception.model_instance, "5")
        self.assertIn("joint actuator named 'X'", str(cm.exception))


class TestScopedNames(unittest.TestCase):
    def test_scoped_name(self):
        self.assertEqual(scoped_name("robot1", "base_link"), "robot1::base_link")
        self.assertEqual(scoped_name("robot1", "base_link", "/"), "robot1/base_link")

    def test_split_scoped_name(self):
        self.assertEqual(split_scoped_name("base_link"), (None, "base_link"))
        self.assertEqual(split_scoped_name("robot1::base_link"), ("robot1", "base_link"))
        self.assertEqual(split_scoped_name("weld::robot1::base_link"), ("weld", "robot1::base_link"))


###
# Test execution
###

if __name__ == "__main__":
    unittest.main(verbosity=2)
