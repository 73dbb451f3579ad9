from rich.pretty import pprint

from switchyard import ParameterHandler

sources = []
handler = ParameterHandler(["-settings", "rules.xml", "-cache", "a.cs", "-bogus", "b.cs"])
handler.add_mandatory_parameter("settings", "Specify the settings file to load", print)
handler.add_switch("cache", "Turn on caching", lambda: print("caching"))
handler.set_default(sources.append)


if __name__ == '__main__':
    pprint(handler.parse())
    pprint(sources)
