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

"""Unit tests for programmatic plant construction, lookup and finalization."""

import math
import unittest

import numpy as np
import warp as wp

from multiplant import (
    DEFAULT_MODEL_INSTANCE,
    WORLD_BODY_INDEX,
    WORLD_MODEL_INSTANCE,
    AlreadyFinalizedError,
    AmbiguousNameError,
    DocumentParseError,
    DuplicateEntityNameError,
    DuplicateInstanceNameError,
    EntityKind,
    ErrorKind,
    InvalidJointDampingError,
    JointType,
    NotFoundError,
    Plant,
    PlantError,
    PlantFinalizedError,
)
from multiplant.tests import test_context

###
# Utilities
###


def build_two_pendulums(plant: Plant) -> tuple[int, int]:
    """Adds two model instances, each holding a link hinged to the world."""
    instances = []
    for name in ("pendulum_a", "pendulum_b"):
        instance = plant.add_model_instance(name)
        link = plant.add_rigid_body("link", instance)
        joint = plant.add_joint("hinge", JointType.REVOLUTE, WORLD_BODY_INDEX, link.index, instance, damping=0.5)
        plant.add_joint_actuator("hinge", joint.index, effort_limit=2.0)
        instances.append(instance)
    return instances[0], instances[1]


###
# Tests
###


class TestPlant(unittest.TestCase):
    def setUp(self):
        self.verbose = test_context.verbose
        self.device = test_context.device if test_context.setup_done else wp.get_device("cpu")

    def test_default_instances(self):
        plant = Plant()
        self.assertEqual(plant.num_model_instances, 2)
        self.assertEqual(plant.num_bodies, 1)
        self.assertEqual(plant.num_frames, 1)
        self.assertEqual(plant.num_joints, 0)
        self.assertEqual(plant.num_actuators, 0)
        self.assertFalse(plant.is_finalized)
        self.assertIsNone(plant.model)

        self.assertEqual(plant.get_model_instance_by_name("WorldModelInstance"), WORLD_MODEL_INSTANCE)
        self.assertEqual(plant.get_model_instance_by_name("DefaultModelInstance"), DEFAULT_MODEL_INSTANCE)
        self.assertEqual(plant.world_body.name, "world")
        self.assertEqual(plant.get_body_by_name("world").index, WORLD_BODY_INDEX)
        self.assertEqual(plant.get_frame_by_name("world", WORLD_MODEL_INSTANCE).body, WORLD_BODY_INDEX)

    def test_add_rigid_body(self):
        plant = Plant()
        body = plant.add_rigid_body("box")
        self.assertEqual(body.index, 1)
        self.assertEqual(body.model_instance, DEFAULT_MODEL_INSTANCE)

        # Every body gets a frame of the same name
        frame = plant.get_frame_by_name("box")
        self.assertEqual(frame.body, body.index)
        self.assertEqual(frame.model_instance, DEFAULT_MODEL_INSTANCE)
        self.assertEqual(plant.num_frames, 2)

        with self.assertRaises(DuplicateEntityNameError):
            plant.add_rigid_body("box")

        # A body cannot take the name of an existing frame of its instance
        plant.add_frame("marker", body.index)
        with self.assertRaises(DuplicateEntityNameError) as cm:
            plant.add_rigid_body("marker")
        self.assertEqual(cm.exception.entity_kind, EntityKind.FRAME)
        self.assertEqual(plant.num_bodies, 2)

        with self.assertRaises(NotFoundError):
            plant.add_rigid_body("floating", 5)

    def test_add_joint(self):
        plant = Plant()
        instance = plant.add_model_instance("robot")
        base = plant.add_rigid_body("base", instance)
        arm = plant.add_rigid_body("arm", instance)

        joint = plant.add_joint("shoulder", "revolute", base.index, arm.index, instance)
        self.assertEqual(joint.joint_type, JointType.REVOLUTE)
        self.assertEqual(joint.parent_body, base.index)
        self.assertEqual(joint.child_body, arm.index)
        self.assertEqual(joint.damping, 0.0)

        with self.assertRaises(InvalidJointDampingError) as cm:
            plant.add_joint("elbow", JointType.REVOLUTE, base.index, arm.index, instance, damping=-1.0)
        self.assertEqual(cm.exception.joint_name, "elbow")
        self.assertEqual(cm.exception.kind, ErrorKind.INVALID_JOINT_DAMPING)
        self.assertFalse(plant.has_joint_named("elbow"))
        with self.assertRaisesRegex(InvalidJointDampingError, "non-finite"):
            plant.add_joint("elbow", JointType.REVOLUTE, base.index, arm.index, instance, damping=math.nan)

        with self.assertRaisesRegex(DocumentParseError, "connects body 'arm' to itself") as cm:
            plant.add_joint("self", JointType.FIXED, arm.index, arm.index, instance)
        self.assertIsInstance(cm.exception, PlantError)
        self.assertEqual(cm.exception.kind, ErrorKind.DOCUMENT_PARSE)
        with self.assertRaisesRegex(DocumentParseError, "Invalid joint type: 'hinge'") as cm:
            plant.add_joint("bad_type", "hinge", base.index, arm.index, instance)
        self.assertIsInstance(cm.exception, PlantError)
        self.assertIsInstance(cm.exception, ValueError)
        with self.assertRaises(NotFoundError):
            plant.add_joint("dangling", JointType.FIXED, base.index, 42, instance)
        with self.assertRaises(DuplicateEntityNameError):
            plant.add_joint("shoulder", JointType.FIXED, WORLD_BODY_INDEX, base.index, instance)

        self.assertEqual(plant.num_joints, 1)

    def test_add_joint_actuator(self):
        plant = Plant()
        instance = plant.add_model_instance("robot")
        link = plant.add_rigid_body("link", instance)
        joint = plant.add_joint("slider", JointType.PRISMATIC, WORLD_BODY_INDEX, link.index, instance)

        actuator = plant.add_joint_actuator("slider", joint.index, effort_limit=-1.0)
        self.assertEqual(actuator.model_instance, instance)
        self.assertEqual(actuator.joint, joint.index)
        self.assertTrue(math.isinf(actuator.effort_limit))
        self.assertIs(plant.get_joint_actuator_by_name("slider", instance), actuator)

        with self.assertRaises(NotFoundError):
            plant.add_joint_actuator("ghost", 3)

    def test_scoped_and_unscoped_lookup(self):
        plant = Plant()
        a, b = build_two_pendulums(plant)

        with self.assertRaises(AmbiguousNameError) as cm:
            plant.has_body_named("link")
        self.assertEqual(cm.exception.model_instances, ["pendulum_a", "pendulum_b"])
        self.assertIn("Specify one of 'pendulum_a', 'pendulum_b' to disambiguate.", str(cm.exception))

        with self.assertRaises(AmbiguousNameError):
            plant.get_joint_by_name("hinge")
        with self.assertRaisesRegex(AmbiguousNameError, "Joint actuator hinge appears in multiple model instances."):
            plant.has_joint_actuator_named("hinge")
        with self.assertRaisesRegex(AmbiguousNameError, "Frame link appears in multiple model instances."):
            plant.get_frame_by_name("link")

        self.assertTrue(plant.has_body_named("link", a))
        self.assertTrue(plant.has_body_named("link", b))
        self.assertFalse(plant.has_body_named("link", DEFAULT_MODEL_INSTANCE))
        self.assertNotEqual(plant.get_body_by_name("link", a).index, plant.get_body_by_name("link", b).index)
        self.assertNotEqual(plant.get_joint_by_name("hinge", a).index, plant.get_joint_by_name("hinge", b).index)
        self.assertFalse(plant.has_frame_named("missing"))

        with self.assertRaises(NotFoundError):
            plant.get_body_by_name("missing")
        with self.assertRaises(NotFoundError):
            plant.get_body_by_name("link", DEFAULT_MODEL_INSTANCE)
        with self.assertRaises(NotFoundError):
            plant.has_body_named("link", 17)

        self.assertEqual(plant.get_entity_names(EntityKind.BODY, a), ["link"])
        self.assertEqual([j.name for j in plant.get_model_instance_entities(EntityKind.JOINT, b)], ["hinge"])

    def test_duplicate_model_instance(self):
        plant = Plant()
        plant.add_model_instance("robot")
        with self.assertRaises(DuplicateInstanceNameError):
            plant.add_model_instance("robot")
        self.assertEqual(plant.num_model_instances, 3)

    def test_entity_alias(self):
        plant = Plant()
        composite = plant.add_model_instance("composite")
        sub = plant.add_model_instance("composite::sub")
        link = plant.add_rigid_body("link", sub)

        plant.add_entity_alias(EntityKind.BODY, "sub::link", composite, link.index)
        self.assertEqual(plant.num_bodies, 2)
        self.assertIs(plant.get_body_by_name("sub::link", composite), link)
        self.assertEqual(plant.get_body_by_name("sub::link").model_instance, sub)
        self.assertEqual(plant.get_model_instance_entities(EntityKind.BODY, composite), [])

    def test_finalize(self):
        plant = Plant()
        a, b = build_two_pendulums(plant)
        model = plant.finalize(device=self.device)

        self.assertTrue(plant.is_finalized)
        self.assertIs(plant.model, model)
        self.assertEqual(model.device, self.device)
        self.assertEqual(model.num_model_instances, 4)
        self.assertEqual(model.model_instance_name[a], "pendulum_a")
        self.assertEqual(model.body_count, 3)
        self.assertEqual(model.body_name, ["world", "link", "link"])
        np.testing.assert_array_equal(model.body_model_instance.numpy(), [0, a, b])
        self.assertEqual(model.joint_count, 2)
        np.testing.assert_array_equal(model.joint_type.numpy(), [int(JointType.REVOLUTE)] * 2)
        np.testing.assert_array_equal(model.joint_parent.numpy(), [0, 0])
        np.testing.assert_array_equal(model.joint_child.numpy(), [1, 2])
        np.testing.assert_allclose(model.joint_damping.numpy(), [0.5, 0.5])
        self.assertEqual(model.frame_count, 3)
        np.testing.assert_array_equal(model.frame_body.numpy(), [0, 1, 2])
        self.assertEqual(model.actuator_count, 2)
        np.testing.assert_array_equal(model.actuator_joint.numpy(), [0, 1])
        np.testing.assert_allclose(model.actuator_effort_limit.numpy(), [2.0, 2.0])
        np.testing.assert_array_equal(model.get_model_instance_bodies(b), [2])
        np.testing.assert_array_equal(model.get_model_instance_joints(a), [0])

        if self.verbose:
            print("")
            print(f"body_model_instance: {model.body_model_instance}")
            print(f"joint_parent: {model.joint_parent}")

    def test_finalization_lock(self):
        plant = Plant()
        a, _ = build_two_pendulums(plant)
        plant.finalize(device=self.device)

        with self.assertRaises(AlreadyFinalizedError) as cm:
            plant.finalize(device=self.device)
        self.assertEqual(cm.exception.kind, ErrorKind.ALREADY_FINALIZED)

        with self.assertRaises(PlantFinalizedError) as cm:
            plant.add_model_instance("late")
        self.assertEqual(cm.exception.kind, ErrorKind.PLANT_FINALIZED)
        with self.assertRaises(PlantFinalizedError):
            plant.add_rigid_body("late", a)
        with self.assertRaises(PlantFinalizedError):
            plant.add_frame("late", WORLD_BODY_INDEX)
        with self.assertRaises(PlantFinalizedError):
            plant.add_joint("late", JointType.FIXED, WORLD_BODY_INDEX, 1, a)
        with self.assertRaises(PlantFinalizedError):
            plant.add_joint_actuator("late", 0)
        with self.assertRaises(PlantFinalizedError):
            plant.add_entity_alias(EntityKind.BODY, "late", a, 0)

        # Lookups remain available
        self.assertEqual(plant.num_model_instances, 4)
        self.assertTrue(plant.has_body_named("link", a))


###
# Test execution
###

if __name__ == "__main__":
    unittest.main(verbosity=2)
