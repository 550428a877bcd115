from scope import TestTree


has_run = []


with TestTree("SetupFailure") as SF:

    @SF.setup
    def setUp():
        has_run.append("setup")

    @SF.teardown
    def tearDown():
        has_run.append("teardown")

    with SF.context("broken"):

        @SF.setup
        def setUp():
            raise RuntimeError("failing")

        @SF.teardown
        def tearDown():
            has_run.append("broken:teardown")

        @SF.teardown_once
        def tearDown():
            has_run.append("broken:teardown_once")

        @SF.should("not run")
        def test(case):
            has_run.append("broken:test")

    @SF.should("still run")
    def test(case):
        has_run.append("still run")


SF.create_tests(globals())


with TestTree("BodyFailure") as BF:

    @BF.setup_once
    def setUp():
        has_run.append("setup_once")

    @BF.setup
    def setUp():
        has_run.append("setup")

    @BF.should("pass")
    def test(case):
        has_run.append("pass")

    @BF.should("fail")
    def test(case):
        has_run.append("fail")
        case.assertEqual(1, 2)

    @BF.teardown
    def tearDown():
        has_run.append("teardown")

    @BF.teardown_once
    def tearDown():
        has_run.append("teardown_once")


BF.create_tests(globals())


with TestTree("TeardownFailure") as TF:

    @TF.teardown
    def tearDown():
        has_run.append("teardown")

    with TF.context("inner"):

        @TF.teardown
        def tearDown():
            has_run.append("inner:teardown")
            raise RuntimeError("failing")

        @TF.teardown_once
        def tearDown():
            has_run.append("inner:teardown_once")

        @TF.should("error")
        def test(case):
            has_run.append("inner:test")


TF.create_tests(globals())


with TestTree("BodyAndTeardownFailure") as BTF:

    @BTF.teardown
    def tearDown():
        has_run.append("teardown")
        raise RuntimeError("failing")

    @BTF.should("fail despite the teardown")
    def test(case):
        has_run.append("fail")
        case.fail("failing")


BTF.create_tests(globals())


expected_has_run = [
    "setup", "teardown",
    "setup", "still run", "teardown",
    "setup_once", "setup", "pass", "teardown",
    "setup", "fail", "teardown", "teardown_once",
    "inner:test", "inner:teardown", "inner:teardown_once", "teardown",
    "fail", "teardown",
]

expected_stream_output = [
    "broken should not run ... ERROR",
    "should still run ... ok",
    "should pass ... ok",
    "should fail ... FAIL",
    "inner should error ... ERROR",
    "should fail despite the teardown ... FAIL",
]
