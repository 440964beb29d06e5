import os
from ament_index_python.packages import get_package_share_directory
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node

def generate_launch_description():
    pkg_share = get_package_share_directory('waypoint_maker')
    default_params = os.path.join(pkg_share, 'config', 'waypoint_maker.yaml')

    params_file = LaunchConfiguration('params_file')
    cmd_vel_topic = LaunchConfiguration('cmd_vel_topic')

    joy_node = Node(
        package='joy',
        executable='joy_node',
        name='joy_node',
        output='screen',
    )

    waypoint_maker = Node(
        package='waypoint_maker',
        executable='waypoint_maker',
        name='waypoint_maker',
        output='screen',
        parameters=[params_file],
        remappings=[('ypspur_ros/cmd_vel', cmd_vel_topic)],
    )

    return LaunchDescription([
        DeclareLaunchArgument('params_file', default_value=default_params),
        DeclareLaunchArgument('cmd_vel_topic', default_value='ypspur_ros/cmd_vel'),
        joy_node,
        waypoint_maker,
    ])
