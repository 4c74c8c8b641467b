class Isaac64Error(ValueError):
    """Base de los errores de entrada; siguen siendo ValueError."""

class SeedError(Isaac64Error):
    """Semilla vacía, sobredimensionada, fuera de rango o cero sin opt-in."""

class DoubleDomainError(Isaac64Error):
    """Límites NaN/inf o mezcla de subnormal y normal."""

class CharsetError(Isaac64Error):
    """Alfabeto vacío (o mayor de 256 símbolos) en rand_alphanum."""

class WidthError(Isaac64Error):
    """Argumento entero que no cabe en el ancho pedido."""
