from scope import TestTree


has_run = []


with TestTree("TestingModeTests") as TM:

    @TM.setup_once
    def setUp():
        has_run.append("setup_once")

    @TM.teardown_once
    def tearDown():
        has_run.append("teardown_once")

    with TM.context("testing mode"):

        @TM.should("b")
        def test(case):
            has_run.append("b")

        @TM.should("a")
        def test(case):
            has_run.append("a")


TM.create_tests(globals())


with TestTree("OverriddenFixtures") as OF:

    @OF.setup
    def setUp():
        has_run.append("setup")

    @OF.teardown
    def tearDown():
        has_run.append("teardown")

    @OF.should("run")
    def test(case):
        has_run.append("run")


OverriddenFixtures = OF.create_tests(globals())


def setUp(self):
    has_run.append("TestCase.setUp")


def tearDown(self):
    has_run.append("TestCase.tearDown")


OverriddenFixtures.setUp = setUp
OverriddenFixtures.tearDown = tearDown


expected_has_run = [
    "setup_once", "b", "a", "teardown_once",
    "TestCase.setUp", "setup", "run", "teardown", "TestCase.tearDown",
]

expected_stream_output = [
    "testing mode should b ... ok",
    "testing mode should a ... ok",
    "should run ... ok",
]
