class StarTrackerConfig:
    # Identification and scheduling
    component_id = 0  # telemetry column prefix stt<id>_
    prescaler = 1  # run every prescaler-th base clock count

    # Mounting: body -> component quaternion [x, y, z, w]; line of sight is +X of the component frame
    quaternion_b2c = (0.0, 0.0, 0.0, 1.0)

    # Attitude noise model
    sigma_orthogonal = 1.0e-4  # [rad], cross-boresight 1 sigma
    sigma_sight = 5.0e-4  # [rad], rotation about the line of sight 1 sigma
    random_seed = None  # int or numpy SeedSequence; None is non-reproducible

    # Timing model
    step_period = 0.1  # [s], sensor update period
    output_delay = 0.0  # [s], processing latency
    output_interval = 1  # [ticks], output refresh cadence

    # Exclusion model
    sun_exclusion_angle_deg = 50.0  # [deg]
    earth_exclusion_angle_deg = 30.0  # [deg], measured from the earth limb
    moon_exclusion_angle_deg = 20.0  # [deg]
    capture_rate_limit_deg_s = 2.0  # [deg/s]
    earth_radius = 6378136.6  # [m], used for the earth's apparent size


class GnssReceiverConfig:
    # Identification and scheduling
    component_id = 0  # telemetry column prefix gnss<id>_
    prescaler = 1  # run every prescaler-th base clock count

    # Antenna: "cone" (cone field of view with earth occlusion) or "hemisphere"
    antenna_model = "cone"
    antenna_position_b = (0.0, 0.0, 0.0)  # [m], offset from the spacecraft centre, body frame
    quaternion_b2c = (0.0, 0.0, 0.0, 1.0)  # body -> antenna frame; antenna boresight is +Z
    half_width_deg = 60.0  # [deg], cone half angle
    compatible_systems = "G"  # accepted first characters of satellite identifiers
    occluding_radius = 6378137.0  # [m], radius of the occluding earth

    # Position noise model
    noise_std = (2.0, 2.0, 2.0)  # [m], per inertial axis 1 sigma
    random_seed = None  # int or numpy SeedSequence; None is non-reproducible

    # Timing model
    step_period = 0.1  # [s], sensor update period
    output_delay = 0.0  # [s], processing latency
    output_interval = 1  # [ticks], output refresh cadence
