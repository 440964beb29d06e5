#!/usr/bin/env python3
"""
waypoint_maker_node.py
Joystick teleop + waypoint capture.

  joy            -> ypspur_ros/cmd_vel (linear = axes[3], angular = axes[0])
  button 2       -> append current amcl_pose to CSV as x,y,yaw
                    and publish an arrow on waypoint_markers
"""

import os

import rclpy
from rclpy.node import Node
from geometry_msgs.msg import PoseWithCovarianceStamped, Twist
from sensor_msgs.msg import Joy
from visualization_msgs.msg import Marker

from waypoint_maker.capture_trigger import CaptureTrigger, ControlInput
from waypoint_maker.control_loop import ControlLoop
from waypoint_maker.pose_tracker import Pose, PoseTracker
from waypoint_maker.waypoint_recorder import (
    WaypointRecorder,
    WaypointStore,
    resume_first_id,
)


def pose_from_msg(msg: PoseWithCovarianceStamped) -> Pose:
    p = msg.pose.pose
    return Pose(
        x=p.position.x, y=p.position.y, z=p.position.z,
        qx=p.orientation.x, qy=p.orientation.y,
        qz=p.orientation.z, qw=p.orientation.w,
    )


def control_input_from_msg(msg: Joy) -> ControlInput:
    return ControlInput(axes=tuple(msg.axes), buttons=tuple(msg.buttons))


class WaypointMaker(Node):
    def __init__(self):
        super().__init__('waypoint_maker')

        # Parameters
        self.declare_parameter('csv_path', '~/.ros/waypoints.csv')
        self.declare_parameter('frame_id', 'map')
        self.declare_parameter('marker_ns', 'waypoints')
        self.declare_parameter('linear_axis', 3)
        self.declare_parameter('angular_axis', 0)
        self.declare_parameter('capture_button', 2)
        self.declare_parameter('rate_hz', 10.0)
        self.declare_parameter('resume_ids', False)

        self.csv_path = os.path.expanduser(self.get_parameter('csv_path').value)
        self.frame_id = self.get_parameter('frame_id').value
        self.marker_ns = self.get_parameter('marker_ns').value
        linear_axis = self.get_parameter('linear_axis').value
        angular_axis = self.get_parameter('angular_axis').value
        capture_button = self.get_parameter('capture_button').value
        rate_hz = float(self.get_parameter('rate_hz').value)
        resume_ids = self.get_parameter('resume_ids').value

        if rate_hz <= 0.0:
            raise ValueError(f'rate_hz must be positive, got {rate_hz}')

        # Publishers
        self.marker_pub = self.create_publisher(Marker, 'waypoint_markers', 10)
        self.cmd_vel_pub = self.create_publisher(Twist, 'ypspur_ros/cmd_vel', 10)

        # Core
        store = WaypointStore(self.csv_path)
        first_id = resume_first_id(store, self.get_logger()) if resume_ids else 0

        self.tracker = PoseTracker()
        self.trigger = CaptureTrigger(linear_axis, angular_axis, capture_button)
        self.recorder = WaypointRecorder(
            self.tracker, store, self.publish_marker, self.get_logger(),
            frame_id=self.frame_id, namespace=self.marker_ns, first_id=first_id)
        self.loop = ControlLoop(
            self.tracker, self.trigger, self.recorder, self.publish_velocity,
            self.get_logger(), period=1.0 / rate_hz)

        # Subscriptions (callbacks only enqueue, the timer does the work)
        self.joy_sub = self.create_subscription(
            Joy, 'joy', self.joy_callback, 10)
        self.pose_sub = self.create_subscription(
            PoseWithCovarianceStamped, 'amcl_pose', self.pose_callback, 10)

        self.timer = self.create_timer(self.loop.period, self.loop.tick)

        self.get_logger().info('✅ Waypoint Maker Started')
        self.get_logger().info(f'   Waypoint file: {self.csv_path}')
        self.get_logger().info(f'   Next waypoint id: {first_id}')
        self.get_logger().info(
            f'   Axes: linear={linear_axis}, angular={angular_axis}  '
            f'Capture button: {capture_button}  Rate: {rate_hz:.1f} Hz')

    def joy_callback(self, msg: Joy):
        self.loop.push_input(control_input_from_msg(msg))

    def pose_callback(self, msg: PoseWithCovarianceStamped):
        pose = pose_from_msg(msg)
        self.loop.push_pose(pose)
        self.get_logger().debug(f'Position: x = {pose.x:f}, y = {pose.y:f}')
        self.get_logger().debug(f'Orientation: z = {pose.qz:f}, w = {pose.qw:f}')

    def publish_velocity(self, command):
        twist = Twist()
        twist.linear.x = float(command.linear)
        twist.angular.z = float(command.angular)
        self.cmd_vel_pub.publish(twist)

    def publish_marker(self, arrow):
        m = Marker()
        m.header.frame_id = arrow.frame_id
        m.header.stamp = self.get_clock().now().to_msg()
        m.ns = arrow.namespace
        m.id = arrow.id
        m.type = Marker.ARROW
        m.action = Marker.ADD

        m.pose.position.x = float(arrow.pose.x)
        m.pose.position.y = float(arrow.pose.y)
        m.pose.position.z = float(arrow.pose.z)
        m.pose.orientation.x = float(arrow.pose.qx)
        m.pose.orientation.y = float(arrow.pose.qy)
        m.pose.orientation.z = float(arrow.pose.qz)
        m.pose.orientation.w = float(arrow.pose.qw)

        m.scale.x, m.scale.y, m.scale.z = arrow.scale
        m.color.r, m.color.g, m.color.b, m.color.a = arrow.color
        self.marker_pub.publish(m)


def main(args=None):
    rclpy.init(args=args)
    node = WaypointMaker()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        node.get_logger().info('Shutting down...')
    finally:
        node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()


if __name__ == '__main__':
    main()
