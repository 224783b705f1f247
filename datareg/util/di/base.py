from dishka import Provider as DishkaProvider

from datareg.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for datareg DI providers.

    Anything provided without an explicit scope lives for one unit of work.
    """

    scope = Scope.UOW
